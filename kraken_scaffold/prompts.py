"""Interactive questions and the prompters that answer them.

Questions whose name starts with ``dependency:`` produce a dependency key for
the slot after the colon; every other answer is stored on ``AppConfig``
verbatim.
"""

from __future__ import annotations

import asyncio
from typing import Any, Protocol

from pydantic import BaseModel, Field
from rich.prompt import Prompt

from .config import AppConfig, GeneratorOptions
from .utils import console

DEPENDENCY_PREFIX = "dependency:"


class Choice(BaseModel):
    """One selectable answer; ``value`` is ``None`` for "none of these"."""

    label: str
    value: str | None


class Question(BaseModel):
    """Declarative description of one prompt."""

    name: str
    message: str
    choices: list[Choice] = Field(default_factory=list)
    default: str | None = None

    @property
    def slot(self) -> str | None:
        """The dependency slot this question fills, if it is a dependency question."""
        if self.name.startswith(DEPENDENCY_PREFIX):
            return self.name[len(DEPENDENCY_PREFIX):]
        return None


def _none() -> Choice:
    return Choice(label="None", value=None)


def build_questions(options: GeneratorOptions, app_config: AppConfig) -> list[Question]:
    """Return the questions still open after CLI options have been applied."""
    questions: list[Question] = []

    if not app_config.app_name:
        questions.append(
            Question(name="appName", message="What would you like to call this project")
        )
    questions.append(Question(name="appDescription", message="Description", default=""))
    questions.append(Question(name="appAuthor", message="Author", default=""))

    if not options.template_module:
        questions.append(
            Question(
                name=f"{DEPENDENCY_PREFIX}templateModule",
                message="Select a template language",
                choices=[Choice(label="dust", value="dust"), _none()],
                default="dust",
            )
        )
    if not options.ui_package_manager:
        questions.append(
            Question(
                name=f"{DEPENDENCY_PREFIX}bower",
                message="Select a UI package manager",
                choices=[Choice(label="bower", value="bower"), _none()],
                default="bower",
            )
        )
    if not options.css_module:
        questions.append(
            Question(
                name=f"{DEPENDENCY_PREFIX}cssModule",
                message="Select a CSS preprocessor",
                choices=[
                    Choice(label="less", value="less"),
                    Choice(label="sass", value="sass"),
                    Choice(label="stylus", value="stylus"),
                    _none(),
                ],
                default="less",
            )
        )
    if not options.js_module:
        questions.append(
            Question(
                name=f"{DEPENDENCY_PREFIX}jsModule",
                message="Select a JavaScript module library",
                choices=[
                    Choice(label="requirejs", value="requirejs"),
                    Choice(label="browserify", value="browserify"),
                    _none(),
                ],
                default="None",
            )
        )
    return questions


class Prompter(Protocol):
    """Anything that can answer a list of questions."""

    async def ask(self, questions: list[Question]) -> dict[str, Any]: ...


class StaticPrompter:
    """Answers questions from a fixed mapping, falling back to each default.

    Used for ``--no-prompt`` runs and in tests.
    """

    def __init__(self, answers: dict[str, Any] | None = None) -> None:
        self.answers = dict(answers or {})

    async def ask(self, questions: list[Question]) -> dict[str, Any]:
        result: dict[str, Any] = {}
        for question in questions:
            if question.name in self.answers:
                result[question.name] = self.answers[question.name]
            else:
                result[question.name] = _choice_value(question, question.default)
        return result


class RichPrompter:
    """Asks each question on the terminal with ``rich.prompt``."""

    async def ask(self, questions: list[Question]) -> dict[str, Any]:
        return await asyncio.to_thread(self._ask_all, questions)

    def _ask_all(self, questions: list[Question]) -> dict[str, Any]:
        answers: dict[str, Any] = {}
        for question in questions:
            if question.choices:
                label = Prompt.ask(
                    question.message,
                    choices=[c.label for c in question.choices],
                    default=question.default,
                    console=console,
                )
                answers[question.name] = _choice_value(question, label)
            else:
                answers[question.name] = Prompt.ask(
                    question.message, default=question.default, console=console
                )
        return answers


def _choice_value(question: Question, label: str | None) -> Any:
    """Map a choice label back to its value; free-text answers pass through."""
    if not question.choices:
        return label
    for choice in question.choices:
        if choice.label == label:
            return choice.value
    return None
