"""
Validation pipeline: an ordered list of steps run by a small runner.

A validator is a pure function `value -> ValidationResult`. A `Step` pairs a
validator with the part of the request it inspects. `Pipeline.run` evaluates
steps in declaration order and returns the first failure untouched, so the
error output only ever contains that step's messages.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class ValidationResult:
    ok: bool
    code: str | None = None
    summary: str = ""
    messages: tuple[str, ...] = ()

    @classmethod
    def success(cls) -> ValidationResult:
        return cls(ok=True)

    @classmethod
    def failure(cls, code: str, summary: str, messages: list[str] | tuple[str, ...]) -> ValidationResult:
        return cls(ok=False, code=code, summary=summary, messages=tuple(messages))


Validator = Callable[[Any], ValidationResult]


@dataclass(frozen=True)
class RequestData:
    path_params: Mapping[str, str] = field(default_factory=dict)
    body: Any = None
    # Set when the raw body could not be decoded as JSON.
    body_error: str | None = None


@dataclass(frozen=True)
class Step:
    name: str
    validator: Validator
    select: Callable[[RequestData], Any]

    def __call__(self, data: RequestData) -> ValidationResult:
        return self.validator(self.select(data))


def path_param(name: str, validator: Validator) -> Step:
    return Step(name=f"path:{name}", validator=validator, select=lambda data: data.path_params.get(name))


MALFORMED_BODY = ValidationResult.failure("invalid_json", "Invalid JSON", ["Request body must be valid JSON"])


def _malformed_or(validator: Validator) -> Validator:
    def check(data: RequestData) -> ValidationResult:
        if data.body_error is not None:
            return MALFORMED_BODY
        return validator(data.body)

    return check


def body(validator: Validator) -> Step:
    return Step(name="body", validator=_malformed_or(validator), select=lambda data: data)


class Pipeline:
    def __init__(self, *steps: Step) -> None:
        self.steps: tuple[Step, ...] = steps

    @property
    def reads_body(self) -> bool:
        return any(step.name == "body" for step in self.steps)

    def run(self, data: RequestData) -> ValidationResult:
        for step in self.steps:
            result = step(data)
            if not result.ok:
                return result
        return ValidationResult.success()
