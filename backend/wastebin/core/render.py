import html
from typing import Optional, Protocol


class Renderer(Protocol):
    def render(self, text: str, extension: Optional[str]) -> str:
        ...


class EscapedTextRenderer:
    """Minimal renderer: escaped text in a <pre> block tagged with the extension."""

    def render(self, text: str, extension: Optional[str]) -> str:
        language = html.escape(extension or "txt", quote=True)
        return f'<pre class="language-{language}">{html.escape(text)}</pre>'
