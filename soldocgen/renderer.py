"""
soldocgen Bundle Renderer

This module writes the documentation bundle from resolved ContractDoc
records. The bundle is a plain directory that can be served as static files
or picked up by a front-end build.

Bundle Layout:
    docgen-data.json                      all records, keyed by contract
    index.html                            contract index (Jinja2 template)
    contracts/<source>/<Contract>.md      one Markdown page per contract

Design Principles:
    1. The JSON file is the contract with front-ends; the HTML and Markdown
       pages are conveniences built from the same records
    2. Sections are only emitted when there is data for them
    3. NatSpec text is passed through unchanged
    4. Any failure is reported as BundleError with the cause attached
"""

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from jinja2 import Environment, PackageLoader, TemplateError, select_autoescape

from soldocgen import __version__
from soldocgen.errors import BundleError
from soldocgen.schema import ContractDoc, MemberDoc, docs_to_dict
from soldocgen.signatures import member_signature

DATA_FILE = "docgen-data.json"
INDEX_FILE = "index.html"
CONTRACTS_DIR = "contracts"


@dataclass
class RenderOptions:
    """
    Configuration options for bundle rendering.

    Attributes:
        include_html: Write index.html
        include_markdown: Write one Markdown page per contract
        json_indent: Indentation of docgen-data.json (None for compact)
    """
    include_html: bool = True
    include_markdown: bool = True
    json_indent: Optional[int] = 2


def contract_page_path(doc: ContractDoc) -> Path:
    """Bundle-relative path of a contract's Markdown page."""
    return Path(CONTRACTS_DIR) / doc.source / f"{doc.name}.md"


class ContractPageRenderer:
    """
    Renders one ContractDoc as a Markdown page.

    Usage:
        page = ContractPageRenderer(doc).render()
    """

    def __init__(self, doc: ContractDoc):
        self.doc = doc
        self._sections: list[str] = []

    def render(self) -> str:
        """
        Generate the complete page.

        Returns:
            The rendered page as a Markdown string
        """
        self._sections = []

        self._add_title_section()
        self._add_overview_section()
        self._add_special_section("Constructor", self.doc.constructor)
        self._add_special_section("Fallback", self.doc.fallback)
        self._add_special_section("Receive", self.doc.receive)
        self._add_group_section("Methods", self.doc.methods)
        self._add_group_section("Events", self.doc.events)
        self._add_group_section("State Variables", self.doc.state_variables)

        return "\n".join(self._sections)

    def _add_section(self, content: str) -> None:
        """Add a section to the output."""
        if content.strip():
            self._sections.append(content)

    def _add_title_section(self) -> None:
        title = f"# {self.doc.name}\n\n`{self.doc.source}`\n"
        if self.doc.title:
            title += f"\n**{self.doc.title}**\n"
        if self.doc.author:
            title += f"\n*Author: {self.doc.author}*\n"
        self._add_section(title)

    def _add_overview_section(self) -> None:
        parts = [text for text in (self.doc.notice, self.doc.details) if text]
        self._add_section("\n\n".join(parts) + "\n" if parts else "")

    def _add_special_section(self, heading: str, record: Optional[MemberDoc]) -> None:
        if record is None:
            return
        signature = member_signature(record)
        self._add_section(f"## {heading}\n\n" + self._format_member(signature, record, level=3))

    def _add_group_section(self, heading: str, group: Optional[dict[str, MemberDoc]]) -> None:
        if not group:
            return
        section = f"## {heading}\n\n"
        for signature, record in group.items():
            section += self._format_member(signature, record, level=3)
        self._add_section(section)

    def _format_member(self, signature: str, record: MemberDoc, level: int) -> str:
        """
        Format one member: signature heading, notice, details, params, returns.
        """
        lines = [f"{'#' * level} `{signature}`", ""]

        if record.get("notice"):
            lines += [str(record["notice"]), ""]
        if record.get("details"):
            lines += [str(record["details"]), ""]

        params = record.get("params")
        if isinstance(params, dict) and params:
            lines.append("**Parameters**")
            lines.append("")
            lines += [f"- `{name}`: {text}" for name, text in params.items()]
            lines.append("")

        returns = record.get("returns")
        if isinstance(returns, dict) and returns:
            lines.append("**Returns**")
            lines.append("")
            lines += [f"- `{name}`: {text}" for name, text in returns.items()]
            lines.append("")

        return "\n".join(lines) + "\n"


def _bundle_data(docs: dict[str, ContractDoc]) -> dict[str, Any]:
    # Contracts sorted by name; member groups keep ABI declaration order.
    return dict(sorted(docs_to_dict(docs).items()))


def _json_for_script(data: Any) -> str:
    # Keep the payload from closing the surrounding <script> element.
    return json.dumps(data).replace("</", "<\\/")


class BundleRenderer:
    """
    Writes ContractDoc records into a bundle directory.

    Usage:
        renderer = BundleRenderer(docs, Path("docgen"))
        written = renderer.render()

    The output directory is created if needed. Existing files with the same
    names are overwritten; clearing stale files is the caller's job.
    """

    def __init__(
        self,
        docs: dict[str, ContractDoc],
        output_directory: Path,
        options: Optional[RenderOptions] = None,
    ):
        """
        Initialize the renderer.

        Args:
            docs: Resolved docs keyed by fully-qualified contract name
            output_directory: Bundle directory to write into
            options: Rendering options (uses defaults if not provided)
        """
        self.docs = docs
        self.output_directory = Path(output_directory)
        self.options = options or RenderOptions()
        self._env = Environment(
            loader=PackageLoader("soldocgen", "templates"),
            autoescape=select_autoescape(["html"]),
            trim_blocks=True,
            lstrip_blocks=True,
        )

    def render(self) -> list[Path]:
        """
        Write the bundle.

        Returns:
            Paths of all files written

        Raises:
            BundleError: If rendering or writing fails
        """
        try:
            return self._render()
        except BundleError:
            raise
        except (OSError, TemplateError, TypeError, ValueError) as e:
            raise BundleError(f"Failed to write documentation bundle: {e}") from e

    def _render(self) -> list[Path]:
        self.output_directory.mkdir(parents=True, exist_ok=True)
        written = [self._write_data()]

        if self.options.include_markdown:
            for doc in self.docs.values():
                written.append(self._write_contract_page(doc))

        if self.options.include_html:
            written.append(self._write_index())

        return written

    def _write(self, relative_path: Path, content: str) -> Path:
        target = (self.output_directory / relative_path).resolve()
        if not target.is_relative_to(self.output_directory.resolve()):
            raise BundleError(f"Refusing to write outside the bundle: {relative_path}")
        target.parent.mkdir(parents=True, exist_ok=True)
        with open(target, "w", encoding="utf-8") as f:
            f.write(content)
        return target

    def _write_data(self) -> Path:
        content = json.dumps(_bundle_data(self.docs), indent=self.options.json_indent)
        return self._write(Path(DATA_FILE), content + "\n")

    def _write_contract_page(self, doc: ContractDoc) -> Path:
        return self._write(contract_page_path(doc), ContractPageRenderer(doc).render())

    def _write_index(self) -> Path:
        template = self._env.get_template("index.html")
        contracts = [
            {
                "fully_qualified_name": contract_name,
                "doc": doc,
                "page": contract_page_path(doc).as_posix() if self.options.include_markdown else None,
            }
            for contract_name, doc in sorted(self.docs.items())
        ]
        content = template.render(
            contracts=contracts,
            version=__version__,
            data_json=_json_for_script(_bundle_data(self.docs)),
        )
        return self._write(Path(INDEX_FILE), content)


def render_bundle(
    docs: dict[str, ContractDoc],
    output_directory: Path,
    options: Optional[RenderOptions] = None,
) -> list[Path]:
    """
    Convenience function to write a bundle from resolved docs.

    Args:
        docs: Resolved docs keyed by fully-qualified contract name
        output_directory: Bundle directory to write into
        options: Optional rendering options

    Returns:
        Paths of all files written

    Example:
        from soldocgen.artifacts import ArtifactStore
        from soldocgen.resolver import resolve_all
        from soldocgen.renderer import render_bundle

        docs = resolve_all(ArtifactStore("artifacts"))
        render_bundle(docs, Path("docgen"))
    """
    renderer = BundleRenderer(docs, output_directory, options)
    return renderer.render()
