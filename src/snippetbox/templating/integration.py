"""Kida environment setup and template data.

The environment is created once when the app freezes and shared by every
request. ``TemplateData`` is the one shape every page receives.
"""

import dataclasses
from dataclasses import dataclass
from typing import Any

from kida import ChoiceLoader, Environment, FileSystemLoader

from snippetbox.config import PACKAGE_DIR, AppConfig
from snippetbox.templating.filters import BUILTIN_FILTERS, BUILTIN_GLOBALS

TEMPLATE_DIR = PACKAGE_DIR / "ui" / "html"


@dataclass(frozen=True, slots=True)
class TemplateData:
    """Data passed to every page.

    Attributes:
        current_year: For the footer.
        flash: One-shot message popped from the session, or ``""``.
        is_authenticated: The request's authentication flag.
        csrf_token: Token for every form on the page.
        form: Form being shown, with input and errors when re-rendered.
        snippet: Single snippet on the view page.
        snippets: Latest snippets on the home page.
        user: Logged-in user on the account page.
    """

    current_year: int
    flash: str = ""
    is_authenticated: bool = False
    csrf_token: str = ""
    form: Any = None
    snippet: Any = None
    snippets: tuple[Any, ...] = ()
    user: Any = None

    def context(self) -> dict[str, Any]:
        """Top-level template variables (shallow; nested objects stay objects)."""
        return {f.name: getattr(self, f.name) for f in dataclasses.fields(self)}


def create_environment(config: AppConfig) -> Environment:
    """Create the kida Environment from app configuration.

    ``config.template_dir``, when set, is searched before the packaged
    templates so a deployment can override individual pages.
    """
    loaders = []
    if config.template_dir is not None:
        loaders.append(FileSystemLoader(str(config.template_dir)))
    loaders.append(FileSystemLoader(str(TEMPLATE_DIR)))

    env = Environment(
        loader=ChoiceLoader(loaders),
        autoescape=True,
        auto_reload=config.debug,
        trim_blocks=True,
        lstrip_blocks=True,
    )
    env.update_filters(BUILTIN_FILTERS)
    for name, value in BUILTIN_GLOBALS.items():
        env.add_global(name, value)
    return env


def render_page(env: Environment, page: str, data: TemplateData) -> str:
    """Render ``pages/<page>`` to a string.

    Rendering completes before anything is sent, so a template error
    becomes a clean 500 rather than a half-written page.
    """
    template = env.get_template(f"pages/{page}")
    return template.render(data.context())
