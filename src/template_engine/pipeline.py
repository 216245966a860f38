"""End-to-end document processing.

One invocation owns one document tree and runs the stages strictly in
order: normalize -> schema -> mapping -> tag literals -> detect highlights
-> generate -> inject -> validate -> serialize. Nothing here is shared
between invocations except the (stateless) collaborator, so documents can be
processed on parallel threads.

The three public entry points mirror how callers use the engine:

* :func:`run_pipeline` fills a template in one go (auto mode);
* :func:`detect_slots` tags a template and reports what needs a value;
* :func:`inject_and_finish` writes caller-supplied values into a tagged
  template produced by :func:`detect_slots`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Mapping, Sequence, TypeVar

from .collaborators.base import Collaborator
from .config.settings import Settings
from .config.settings import settings as default_settings
from .errors import CollaboratorError, ProcessingError
from .injector import TableInjectionResult, inject_table, inject_values
from .normalizer import NormalizeReport, describe_outline, normalize
from .ooxml import iter_slots, slot_tag
from .package import DocxPackage
from .schema import extract_schema
from .table_context import group_slots_by_table, serialize_table
from .tagger import HighlightReport, TaggingAnomaly, detect_highlights, tag_literals
from .validator import Violation, validate

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ProcessingMode(str, Enum):
    AUTO = "auto"  # mapping and free text generated, caller values optional
    MANUAL = "manual"  # caller supplies every value
    AI = "ai"  # values the caller leaves out are generated from the document


@dataclass
class PipelineResult:
    document: bytes
    violations: list[Violation] = field(default_factory=list)
    anomalies: list[TaggingAnomaly] = field(default_factory=list)
    normalization: NormalizeReport | None = None
    slots_filled: int = 0
    table: TableInjectionResult | None = None


@dataclass
class DetectionResult:
    document: bytes
    prompts: dict[str, str]  # tag -> text shown to whoever supplies the value
    mapping: dict[str, str]  # literal pattern -> tag
    highlight_texts: dict[str, str]  # synthetic tag -> highlighted source text
    anomalies: list[TaggingAnomaly] = field(default_factory=list)
    normalization: NormalizeReport | None = None


@dataclass
class _Prepared:
    package: DocxPackage
    normalization: NormalizeReport
    mapping: dict[str, str]
    highlights: HighlightReport
    anomalies: list[TaggingAnomaly]


class TemplatePipeline:
    """Runs the processing stages for one document per call."""

    def __init__(
        self,
        collaborator: Collaborator | None = None,
        settings: Settings | None = None,
    ):
        self._collaborator = collaborator
        self._settings = settings or default_settings

    @property
    def collaborator(self) -> Collaborator:
        if self._collaborator is None:
            from .config.shared_clients import get_collaborator

            try:
                self._collaborator = get_collaborator()
            except (ValueError, CollaboratorError) as e:
                logger.error("Failed to create collaborator: %s", e)
                raise ProcessingError("collaborator setup", str(e)) from e
        return self._collaborator

    # ------------------------------------------------------------------
    # Stages
    # ------------------------------------------------------------------

    @staticmethod
    def _call(stage: str, fn: Callable[..., T], *args) -> T:
        """Invoke a collaborator; its failures abort the document."""
        try:
            return fn(*args)
        except CollaboratorError as e:
            logger.error("Collaborator failed during %s: %s", stage, e)
            raise ProcessingError(stage, str(e)) from e

    def _prepare(self, document: bytes) -> _Prepared:
        package = DocxPackage.from_bytes(document)
        body = package.body

        logger.info("Phase 1: Normalizing document")
        normalization = normalize(package.root, self._settings.merge_mode)
        if logger.isEnabledFor(logging.DEBUG):
            for line in describe_outline(body):
                logger.debug(line)

        logger.info("Phase 2: Analyzing structure")
        schema = extract_schema(body)
        mapping = self._call("structure analysis", self.collaborator.analyze_structure, schema)

        logger.info("Phase 3: Tagging slots")
        tagging = tag_literals(body, mapping, self._settings.tagging_max_iterations)
        highlights = detect_highlights(body, 0, self._settings.highlight_tag_prefix)

        return _Prepared(
            package=package,
            normalization=normalization,
            mapping=mapping,
            highlights=highlights,
            anomalies=tagging.anomalies,
        )

    def _generate(self, prepared: _Prepared) -> dict[str, str]:
        """Ask the collaborator for every highlight slot's value.

        Table-bound slots are generated in one batch per table, with the
        table's grid as context; the rest get one request each.
        """
        texts = prepared.highlights.texts
        if not texts:
            return {}

        logger.info("Phase 4: Generating content for %d slot(s)", len(texts))
        tables, inline = group_slots_by_table(prepared.package.body, texts)
        values: dict[str, str] = {}

        for table, tags in tables.items():
            markdown = serialize_table(table)
            values.update(self._call(
                "table generation", self.collaborator.generate_table_values, markdown, tags,
            ))

        for tag in inline:
            values[tag] = self._call(
                "content generation", self.collaborator.generate_free_text, texts[tag],
            )
        return values

    def _finish(
        self,
        package: DocxPackage,
        values: Mapping[str, str],
        table_records: Sequence[Mapping[str, str]] | None,
        table_id: str | None,
    ) -> PipelineResult:
        body = package.body

        logger.info("Phase 5: Injecting content")
        filled = inject_values(body, values)
        table = inject_table(body, table_records, table_id) if table_records else None

        logger.info("Phase 6: Validating document structure")
        violations = validate(package.root)

        return PipelineResult(
            document=package.to_bytes(),
            violations=violations,
            slots_filled=filled,
            table=table,
        )

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    def run(
        self,
        document: bytes,
        values: Mapping[str, str] | None = None,
        table_records: Sequence[Mapping[str, str]] | None = None,
        table_id: str | None = None,
    ) -> PipelineResult:
        """Process a template end to end.

        Args:
            document: DOCX bytes.
            values: Values for literal slots; they also override generated
                values for the same tag.
            table_records: Rows for template-table expansion.
            table_id: Schema id of the table to expand (default: first table
                holding a slot tagged with a key of the first record).

        Raises:
            DocumentDecodeError: If the container cannot be opened.
            ProcessingError: If a collaborator call fails.
        """
        prepared = self._prepare(document)
        merged = {**self._generate(prepared), **(values or {})}
        result = self._finish(prepared.package, merged, table_records, table_id)
        result.anomalies = prepared.anomalies
        result.normalization = prepared.normalization
        return result

    def detect_slots(self, document: bytes) -> DetectionResult:
        """Normalize and tag *document* without filling anything.

        Returns:
            DetectionResult whose ``document`` is the tagged template and
            whose ``prompts`` maps each tag to the placeholder literal or
            highlighted text it stands for.
        """
        prepared = self._prepare(document)
        body = prepared.package.body

        present = {slot_tag(sdt) for sdt in iter_slots(body)}
        prompts: dict[str, str] = {}
        for pattern, tag in prepared.mapping.items():
            if tag in present and tag not in prompts:
                prompts[tag] = pattern
        prompts.update(prepared.highlights.texts)

        logger.info("Detected %d slot tag(s)", len(prompts))
        return DetectionResult(
            document=prepared.package.to_bytes(),
            prompts=prompts,
            mapping=prepared.mapping,
            highlight_texts=prepared.highlights.texts,
            anomalies=prepared.anomalies,
            normalization=prepared.normalization,
        )

    def inject_and_finish(
        self,
        document: bytes,
        values: Mapping[str, str],
        table_records: Sequence[Mapping[str, str]] | None = None,
        table_id: str | None = None,
        generate_missing: bool = False,
    ) -> PipelineResult:
        """Fill an already tagged template.

        With *generate_missing*, tags present in the document but absent from
        *values* are generated by the collaborator from the document's text.
        """
        package = DocxPackage.from_bytes(document)
        values = dict(values)

        if generate_missing:
            tags = []
            for sdt in iter_slots(package.body):
                tag = slot_tag(sdt)
                if tag and tag not in values and tag not in tags:
                    tags.append(tag)
            if tags:
                logger.info("Generating values for %d unresolved tag(s)", len(tags))
                generated = self._call(
                    "value generation",
                    self.collaborator.generate_document_values,
                    package.document_text(),
                    tags,
                )
                values = {**generated, **values}

        return self._finish(package, values, table_records, table_id)

    def process(
        self,
        document: bytes,
        mode: ProcessingMode = ProcessingMode.AUTO,
        values: Mapping[str, str] | None = None,
        table_records: Sequence[Mapping[str, str]] | None = None,
    ) -> PipelineResult:
        """Dispatch one of the processing modes."""
        mode = ProcessingMode(mode)
        if mode is ProcessingMode.AUTO:
            return self.run(document, values, table_records)

        detected = self.detect_slots(document)
        result = self.inject_and_finish(
            detected.document,
            values or {},
            table_records,
            generate_missing=mode is ProcessingMode.AI,
        )
        result.anomalies = detected.anomalies
        result.normalization = detected.normalization
        return result


# ---------------------------------------------------------------------------
# Module-level entry points (shared collaborator)
# ---------------------------------------------------------------------------

def run_pipeline(document: bytes, **kwargs) -> PipelineResult:
    return TemplatePipeline().run(document, **kwargs)


def detect_slots(document: bytes) -> DetectionResult:
    return TemplatePipeline().detect_slots(document)


def inject_and_finish(document: bytes, values: Mapping[str, str], **kwargs) -> PipelineResult:
    return TemplatePipeline().inject_and_finish(document, values, **kwargs)
