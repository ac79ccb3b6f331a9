"""Page State Extractor - Turns a live document into a bounded digest for planning."""

import re

import structlog
from bs4 import BeautifulSoup, Tag

from webagent.core.interfaces import Browser
from webagent.core.types import Form, Heading, InteractiveElement, PageStructure


logger = structlog.get_logger()


MAX_HEADINGS = 10
MAX_INTERACTIVE_ELEMENTS = 15
MAX_FORMS = 5
MAX_FORM_FIELDS = 5
MAX_CONTENT_CHARS = 800
MAX_TEXT_CHARS = 100

INTERACTIVE_SELECTOR = (
    "a[href], button, input, select, textarea, [role='button'], [role='link']"
)
FORM_FIELD_TAGS = ["input", "select", "textarea"]
BUTTON_INPUT_TYPES = {"submit", "button", "reset", "image"}
STRIPPED_TAGS = ["script", "style", "noscript", "template"]

_SIMPLE_ID = re.compile(r"^[A-Za-z_][\w-]*$")
_HEADING_TAG = re.compile(r"^h[1-6]$")


def _norm_ws(text: str) -> str:
    return re.sub(r"\s+", " ", text or "").strip()


def _escape(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"')


def _attr(el: Tag, name: str) -> str:
    value = el.get(name)
    if isinstance(value, list):
        value = " ".join(value)
    return _norm_ws(value or "")


class PageStateExtractor:
    """Produces a structured, size-bounded summary of a page."""

    def __init__(
        self,
        max_headings: int = MAX_HEADINGS,
        max_elements: int = MAX_INTERACTIVE_ELEMENTS,
        max_forms: int = MAX_FORMS,
        max_form_fields: int = MAX_FORM_FIELDS,
        max_content_chars: int = MAX_CONTENT_CHARS,
    ) -> None:
        """Initialize the extractor.

        Args:
            max_headings: Headings kept per page
            max_elements: Interactive elements kept per page
            max_forms: Forms kept per page
            max_form_fields: Fields kept per form
            max_content_chars: Characters of main content kept
        """
        self.max_headings = max_headings
        self.max_elements = max_elements
        self.max_forms = max_forms
        self.max_form_fields = max_form_fields
        self.max_content_chars = max_content_chars

    async def capture(self, browser: Browser) -> PageStructure:
        """Read the browser's current document and extract its structure.

        Args:
            browser: Browser to read content and URL from

        Returns:
            PageStructure for the current page
        """
        html = await browser.get_content()
        url = await browser.get_current_url()
        return self.extract(html, url)

    async def snapshot(self, browser: Browser) -> str:
        """Capture the current page and render it for the model.

        Args:
            browser: Browser to read content and URL from

        Returns:
            Page state text block
        """
        return self.format(await self.capture(browser))

    def extract(self, html: str, url: str) -> PageStructure:
        """Extract a page structure from raw HTML.

        Never raises: a document that cannot be parsed yields a structure
        with only the URL filled in.

        Args:
            html: Document HTML
            url: URL the document was loaded from

        Returns:
            PageStructure digest
        """
        if not html:
            return PageStructure(url=url)

        try:
            soup = BeautifulSoup(html, "lxml")
            for tag in soup(STRIPPED_TAGS):
                tag.decompose()

            return PageStructure(
                url=url,
                title=self._extract_title(soup),
                headings=self._extract_headings(soup),
                interactive_elements=self._extract_interactive_elements(soup),
                forms=self._extract_forms(soup),
                main_content=self._extract_main_content(soup),
            )
        except Exception as e:
            logger.warning("page_parse_failed", url=url, error=str(e))
            return PageStructure(url=url)

    def format(self, structure: PageStructure) -> str:
        """Render a page structure as the text block fed to the model.

        Args:
            structure: Extracted page structure

        Returns:
            Text with URL, Title, Headings, Interactive Elements, Forms
            and Main Content sections
        """
        lines = [
            "=== CURRENT PAGE STATE ===",
            f"URL: {structure.url}",
            f"Title: {structure.title}",
            "",
        ]

        if structure.headings:
            lines.append("HEADINGS:")
            for heading in structure.headings:
                indent = " " * ((heading.level - 1) * 2)
                lines.append(f"{indent}{heading.text} ({heading.selector})")
            lines.append("")

        if structure.interactive_elements:
            lines.append("INTERACTIVE ELEMENTS:")
            for el in structure.interactive_elements:
                lines.append(f"- {el.type.upper()}: {el.description} ({el.selector})")
                if el.href:
                    lines.append(f"  URL: {el.href}")
            lines.append("")

        if structure.forms:
            lines.append("FORMS:")
            for idx, form in enumerate(structure.forms, start=1):
                lines.append(f"Form {idx} ({form.selector}):")
                for field in form.fields:
                    lines.append(f"  - {field.description} ({field.selector})")
                if form.submit_button:
                    lines.append(
                        f"  - Submit: {form.submit_button.description} "
                        f"({form.submit_button.selector})"
                    )
            lines.append("")

        if structure.main_content:
            lines.append(f"MAIN CONTENT (first {self.max_content_chars} chars):")
            lines.append(structure.main_content[: self.max_content_chars])
            lines.append("")

        return "\n".join(lines) + "\n"

    def _extract_title(self, soup: BeautifulSoup) -> str:
        if soup.title is None:
            return ""
        return _norm_ws(soup.title.get_text(" ", strip=True))

    def _extract_headings(self, soup: BeautifulSoup) -> list[Heading]:
        headings = []
        for el in soup.find_all(_HEADING_TAG):
            text = _norm_ws(el.get_text(" ", strip=True))
            if not text:
                continue
            headings.append(
                Heading(
                    level=int(el.name[1]),
                    text=text[:MAX_TEXT_CHARS],
                    selector=self._selector_for(el),
                )
            )
            if len(headings) >= self.max_headings:
                break
        return headings

    def _extract_interactive_elements(
        self, soup: BeautifulSoup
    ) -> list[InteractiveElement]:
        elements = []
        for el in soup.select(INTERACTIVE_SELECTOR):
            if not self._is_actionable(el):
                continue
            elements.append(self._describe_element(soup, el))
            if len(elements) >= self.max_elements:
                break
        return elements

    def _extract_forms(self, soup: BeautifulSoup) -> list[Form]:
        forms = []
        for form_el in soup.find_all("form", limit=self.max_forms):
            fields = []
            submit_button = None

            for el in form_el.find_all(FORM_FIELD_TAGS + ["button"]):
                if not self._is_actionable(el):
                    continue
                if self._is_submit_control(el):
                    if submit_button is None:
                        submit_button = self._describe_element(soup, el)
                    continue
                if el.name == "button" or _attr(el, "type").lower() in BUTTON_INPUT_TYPES:
                    continue
                if len(fields) < self.max_form_fields:
                    fields.append(self._describe_element(soup, el))

            forms.append(
                Form(
                    selector=self._selector_for(form_el),
                    fields=fields,
                    submit_button=submit_button,
                )
            )
        return forms

    def _extract_main_content(self, soup: BeautifulSoup) -> str:
        container = (
            soup.find("main")
            or soup.find("article")
            or soup.find(attrs={"role": "main"})
            or soup.body
            or soup
        )
        text = _norm_ws(container.get_text(" ", strip=True))
        return text[: self.max_content_chars]

    def _is_actionable(self, el: Tag) -> bool:
        if el.name == "input" and _attr(el, "type").lower() == "hidden":
            return False
        if el.has_attr("disabled") or _attr(el, "aria-disabled").lower() == "true":
            return False
        return True

    def _is_submit_control(self, el: Tag) -> bool:
        el_type = _attr(el, "type").lower()
        if el.name == "button":
            return el_type in ("", "submit")
        return el.name == "input" and el_type in ("submit", "image")

    def _element_type(self, el: Tag) -> str:
        role = _attr(el, "role").lower()
        if el.name == "a" or role == "link":
            return "link"
        if el.name == "button" or role == "button":
            return "button"
        if el.name == "input" and _attr(el, "type").lower() in BUTTON_INPUT_TYPES:
            return "button"
        return el.name

    def _describe_element(self, soup: BeautifulSoup, el: Tag) -> InteractiveElement:
        text = _norm_ws(el.get_text(" ", strip=True))[:MAX_TEXT_CHARS]
        description = text or self._label_for(soup, el)
        if not description:
            description = _attr(el, "type") or el.name

        href = _attr(el, "href") if el.name == "a" else ""
        return InteractiveElement(
            type=self._element_type(el),
            text=text,
            description=description[:MAX_TEXT_CHARS],
            selector=self._selector_for(el),
            href=href or None,
        )

    def _label_for(self, soup: BeautifulSoup, el: Tag) -> str:
        for attr in ("aria-label", "placeholder", "title", "alt"):
            value = _attr(el, attr)
            if value:
                return value

        el_id = _attr(el, "id")
        if el_id:
            label = soup.find("label", attrs={"for": el_id})
            if label is not None:
                text = _norm_ws(label.get_text(" ", strip=True))
                if text:
                    return text

        parent_label = el.find_parent("label")
        if parent_label is not None:
            text = _norm_ws(parent_label.get_text(" ", strip=True))
            if text:
                return text

        return _attr(el, "name") or _attr(el, "value")

    def _selector_for(self, el: Tag) -> str:
        """Build a CSS selector that is stable for identical documents."""
        el_id = _attr(el, "id")
        if el_id and _SIMPLE_ID.match(el_id):
            return f"#{el_id}"
        if el_id:
            return f'{el.name}[id="{_escape(el_id)}"]'

        for attr in ("name", "aria-label", "placeholder"):
            value = _attr(el, attr)
            if value:
                return f'{el.name}[{attr}="{_escape(value)}"]'

        if el.name == "a":
            href = _attr(el, "href")
            if href:
                return f'a[href="{_escape(href)}"]'

        return self._structural_path(el)

    def _structural_path(self, el: Tag) -> str:
        parts = []
        node = el
        while isinstance(node, Tag) and node.name not in ("html", "[document]"):
            if node.name == "body":
                parts.append("body")
                break

            node_id = _attr(node, "id")
            if node is not el and node_id and _SIMPLE_ID.match(node_id):
                parts.append(f"#{node_id}")
                break

            index = len(node.find_previous_siblings(node.name)) + 1
            parts.append(f"{node.name}:nth-of-type({index})")
            node = node.parent

        return " > ".join(reversed(parts))
