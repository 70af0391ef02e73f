"""
prompts.py

Responsibility: Collect ordered, validated answers from the operator.

A `Prompt` may compute its default (and whether it is asked at all) from the
answers collected before it. Validation failures are reported and the same
prompt is asked again; they are never fatal.

Rendering is delegated to an `Asker`. `QuestionaryAsker` talks to the terminal;
tests pass a scripted asker instead.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Any, Callable, Protocol, Sequence

import questionary

from wpscaffold.steps import Aborted
from wpscaffold.validation import Validator

logger = logging.getLogger(__name__)

Answers = dict[str, Any]


@dataclass(frozen=True)
class Prompt:
    key: str
    message: str
    kind: str = "text"  # text | password | confirm | select
    default: Any = None
    validate: Validator | None = None
    filter: Callable[[Any], Any] | None = None
    when: bool | Callable[[Answers], bool] = True
    choices: Sequence[tuple[str, Any]] = ()


def _resolve(value: Any, answers: Answers) -> Any:
    return value(answers) if callable(value) else value


class Asker(Protocol):
    def ask(self, prompt: Prompt, default: Any) -> Any: ...

    def confirm(self, message: str, default: bool = False) -> bool: ...

    def checkbox(self, message: str, choices: Sequence[tuple[str, Any]]) -> list[Any]: ...

    def error(self, message: str) -> None: ...


def _answered(value: Any) -> Any:
    # questionary returns None when the operator hits Ctrl-C.
    if value is None:
        raise Aborted()
    return value


class QuestionaryAsker:
    def ask(self, prompt: Prompt, default: Any) -> Any:
        if prompt.kind == "confirm":
            question = questionary.confirm(prompt.message, default=bool(default))
        elif prompt.kind == "password":
            question = questionary.password(prompt.message, default=default or "")
        elif prompt.kind == "select":
            choices = [questionary.Choice(title, value=value) for title, value in prompt.choices]
            kwargs = {"default": default} if default is not None else {}
            question = questionary.select(prompt.message, choices=choices, **kwargs)
        else:
            question = questionary.text(prompt.message, default="" if default is None else str(default))
        return _answered(question.ask())

    def confirm(self, message: str, default: bool = False) -> bool:
        return bool(_answered(questionary.confirm(message, default=default).ask()))

    def checkbox(self, message: str, choices: Sequence[tuple[str, Any]]) -> list[Any]:
        items = [questionary.Choice(title, value=value) for title, value in choices]
        return list(_answered(questionary.checkbox(message, choices=items).ask()))

    def error(self, message: str) -> None:
        questionary.print(f">> {message}", style="bold fg:red")


class PromptCollector:
    def __init__(self, asker: Asker) -> None:
        self.asker = asker

    def ask_one(self, prompt: Prompt, answers: Answers) -> Any:
        default = _resolve(prompt.default, answers)
        while True:
            value = self.asker.ask(prompt, default)
            if prompt.filter is not None:
                value = prompt.filter(value)
            if prompt.validate is None:
                return value
            verdict = prompt.validate(value)
            if verdict is True:
                return value
            message = verdict if isinstance(verdict, str) else "Invalid value."
            logger.debug("validation failed for %s: %s", prompt.key, message)
            self.asker.error(message)

    def collect(self, prompts: Sequence[Prompt], initial: Answers | None = None) -> Answers:
        """
        Ask `prompts` in order and return the answer set.

        `initial` answers are visible to computed defaults but are not asked.
        """
        answers: Answers = dict(initial or {})
        for prompt in prompts:
            if not _resolve(prompt.when, answers):
                continue
            answers[prompt.key] = self.ask_one(prompt, answers)
        return answers

    def collect_many(
        self,
        prompt: Prompt,
        *,
        default_for: Callable[[int], Any] | None = None,
        again_message: str = "Do you want to enter another?",
    ) -> list[Any]:
        """
        Ask the same prompt until the operator declines to add another value.

        `default_for(i)` supplies the default of the i-th value.
        """
        if not _resolve(prompt.when, {}):
            return []
        values: list[Any] = []
        while True:
            current = prompt if default_for is None else replace(prompt, default=default_for(len(values)))
            values.append(self.ask_one(current, {}))
            if not self.asker.confirm(again_message, default=True):
                return values


def confirm_ready(asker: Asker, message: str = "Are you ready to proceed?") -> None:
    """Raise `Aborted` unless the operator explicitly says yes."""
    if not asker.confirm(message, default=False):
        raise Aborted()


def confirm_until_yes(asker: Asker, message: str) -> None:
    while not asker.confirm(message, default=False):
        pass
