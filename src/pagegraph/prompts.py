"""Prompt templates offered to MCP clients."""

from dataclasses import dataclass
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, StrictUndefined

templates_path = Path(__file__).parent / "templates" / "prompts"

_env = Environment(
    loader=FileSystemLoader(str(templates_path)),
    undefined=StrictUndefined,
    keep_trailing_newline=False,
    autoescape=False,
)


@dataclass(frozen=True)
class PromptArgument:
    name: str
    description: str
    required: bool = False


@dataclass(frozen=True)
class PromptSpec:
    name: str
    description: str
    arguments: tuple[PromptArgument, ...]

    @property
    def template_name(self) -> str:
        return f"{self.name}.txt.j2"


PROMPTS: dict[str, PromptSpec] = {
    spec.name: spec
    for spec in (
        PromptSpec(
            name="literary_analysis",
            description="Analyze text from a literary criticism perspective",
            arguments=(
                PromptArgument("text", "Text to analyze", required=True),
                PromptArgument("perspective", "Analytical perspective or theory to apply"),
            ),
        ),
        PromptSpec(
            name="creative_continuation",
            description="Continue or develop creative writing",
            arguments=(
                PromptArgument("fragment", "Creative fragment to continue", required=True),
                PromptArgument("style", "Desired style or direction"),
            ),
        ),
        PromptSpec(
            name="knowledge_synthesis",
            description="Synthesize knowledge from multiple sources",
            arguments=(
                PromptArgument("pages", "Page titles to synthesize", required=True),
                PromptArgument("focus", "Synthesis focus or theme"),
            ),
        ),
    )
}


class PromptNotFoundError(KeyError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Unknown prompt: {name}")


def render_prompt(name: str, arguments: dict[str, str | None] | None = None) -> str:
    """Render a prompt as the text of a single user message.

    Missing arguments render a placeholder instead of failing.

    Raises:
        PromptNotFoundError: ``name`` is not a known prompt.
    """
    spec = PROMPTS.get(name)
    if spec is None:
        raise PromptNotFoundError(name)

    arguments = arguments or {}
    context = {arg.name: arguments.get(arg.name) for arg in spec.arguments}
    return _env.get_template(spec.template_name).render(**context).strip()
