"""Splitting one OCR text blob into several independently typed notes."""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Callable
from typing import Any

from quillstack.classification.aliases import ALL_ALIASES, resolve_alias
from quillstack.classification.orchestrator import ClassificationOrchestrator
from quillstack.classification.remote import RemoteGate
from quillstack.models import (
    ClassificationSettings,
    DetectionMethod,
    NoteType,
    Section,
    SectionDetectionResult,
)
from quillstack.scripts.llm_client import strip_code_fences

logger = logging.getLogger(__name__)

MARKER_RE = re.compile(r"#([\w-]+)#")
TAG_RE = re.compile(r"#(\w+)")

AUTO_SPLIT_THRESHOLD = 0.85
MIN_SEMANTIC_LENGTH = 100
SECTION_MAX_TOKENS = 1000

SECTION_PROMPT = """Analyze the following handwritten note text and determine if it contains multiple distinct sections that should be split into separate notes.

Look for:
- Clear topic changes
- Different note types (e.g., todo list followed by meeting notes)
- Distinct information blocks separated by visual cues or context shifts

Only suggest splitting if you are confident (>85%) that there are 2 or more distinct sections.
Copy each section's text verbatim from the input, in the order it appears.

Respond with JSON only:
{
  "hasSections": true/false,
  "confidence": 0.0-1.0,
  "sections": [
    {
      "content": "section text here",
      "type": "general|todo|meeting|email|contact|reminder|expense|shopping|recipe|event|idea|claudePrompt|journal",
      "tags": ["tag1", "tag2"],
      "reasoning": "why this is a separate section"
    }
  ]
}

If there's only one coherent section, return hasSections: false with confidence 1.0."""


def extract_tags(text: str) -> list[str]:
    """Free-form hashtags, lowercased, first occurrence order, type aliases excluded."""
    tags: list[str] = []
    for token in TAG_RE.findall(text):
        tag = token.lower()
        if tag in ALL_ALIASES or NoteType.parse(tag) is not None or tag in tags:
            continue
        tags.append(tag)
    return tags


def _trimmed_span(text: str, start: int, end: int) -> tuple[str, int, int]:
    """Whitespace-trimmed text[start:end] with its offsets in ``text``."""
    raw = text[start:end]
    content = raw.strip()
    if not content:
        return "", start, start
    content_start = start + (len(raw) - len(raw.lstrip()))
    return content, content_start, content_start + len(content)


class SectionSplitter:
    """Explicit ``#type#`` markers first, then an optional remote split, else one section."""

    def __init__(
        self,
        orchestrator: ClassificationOrchestrator,
        gate: RemoteGate | None = None,
        settings_provider: Callable[[], ClassificationSettings] | None = None,
    ) -> None:
        self.orchestrator = orchestrator
        self.gate = gate
        self.settings_provider = settings_provider or orchestrator.settings_provider

    def split(self, text: str) -> list[Section]:
        """Never empty: at least one section covering the input."""
        return self.detect(text).sections

    def detect(self, text: str) -> SectionDetectionResult:
        result = self.detect_explicit(text)
        if result is None and self._remote_allowed(text):
            result = self.detect_semantic(text)
        return result or self.single_section(text)

    def detect_explicit(self, text: str) -> SectionDetectionResult | None:
        matches = list(MARKER_RE.finditer(text))
        if len(matches) < 2:
            return None

        sections: list[Section] = []

        lead, lead_start, lead_end = _trimmed_span(text, 0, matches[0].start())
        if lead:
            classification = self.orchestrator.classify(lead)
            sections.append(
                Section(
                    content=lead,
                    suggested_type=classification.type,
                    suggested_tags=extract_tags(lead),
                    confidence=classification.confidence,
                    span=(lead_start, lead_end),
                    should_auto_split=True,
                )
            )

        for index, match in enumerate(matches):
            end = matches[index + 1].start() if index + 1 < len(matches) else len(text)
            content, start, stop = _trimmed_span(text, match.end(), end)
            if not content:
                continue
            sections.append(
                Section(
                    content=content,
                    suggested_type=resolve_alias(match.group(1)) or NoteType.GENERAL,
                    suggested_tags=extract_tags(content),
                    confidence=1.0,
                    span=(start, stop),
                    should_auto_split=True,
                )
            )

        if len(sections) < 2:
            return None
        logger.debug("Explicit markers produced %d sections", len(sections))
        return SectionDetectionResult(
            sections=sections, should_auto_split=True, method=DetectionMethod.EXPLICIT
        )

    def _remote_allowed(self, text: str) -> bool:
        if self.gate is None or len(text.strip()) <= MIN_SEMANTIC_LENGTH:
            return False
        settings = self.settings_provider()
        return settings.remote_classification_enabled and settings.credential_configured

    def detect_semantic(self, text: str) -> SectionDetectionResult | None:
        """Ask the remote model for a split. None means fall back to one section."""
        if self.gate is None or not self.gate.is_open():
            return None
        return self.gate.call(
            SECTION_PROMPT,
            f"TEXT:\n{text}",
            max_tokens=SECTION_MAX_TOKENS,
            parse=lambda response: self._parse_semantic(
                json.loads(strip_code_fences(response)), text
            ),
        )

    def _parse_semantic(self, payload: Any, text: str) -> SectionDetectionResult | None:
        """Build the split from a decoded reply.

        Raises ValueError for a reply that does not have the expected shape.
        Returns None for a well-formed reply that does not yield a usable split.
        """
        if not isinstance(payload, dict):
            raise ValueError("section detection reply is not a JSON object")
        has_sections = payload.get("hasSections")
        confidence = payload.get("confidence")
        raw_sections = payload.get("sections")
        if (
            not isinstance(has_sections, bool)
            or isinstance(confidence, bool)
            or not isinstance(confidence, int | float)
        ):
            raise ValueError("section detection reply missing hasSections/confidence")
        if not has_sections or not isinstance(raw_sections, list) or len(raw_sections) < 2:
            return None

        shared_confidence = min(max(float(confidence), 0.0), 1.0)
        auto_split = shared_confidence >= AUTO_SPLIT_THRESHOLD
        sections: list[Section] = []
        cursor = 0
        for raw in raw_sections:
            if not isinstance(raw, dict):
                raise ValueError("section entry is not a JSON object")
            content = raw.get("content")
            type_name = raw.get("type")
            if not isinstance(content, str) or not isinstance(type_name, str):
                raise ValueError("section entry missing content/type")
            content = content.strip()
            position = text.find(content, cursor) if content else -1
            if position < 0:
                logger.info("Section text not found in source, keeping single section")
                return None
            cursor = position + len(content)
            raw_tags = raw.get("tags")
            if isinstance(raw_tags, list):
                tags = list(dict.fromkeys(t.lower() for t in raw_tags if isinstance(t, str)))
            else:
                tags = extract_tags(content)
            sections.append(
                Section(
                    content=content,
                    suggested_type=resolve_alias(type_name) or NoteType.GENERAL,
                    suggested_tags=tags,
                    confidence=shared_confidence,
                    span=(position, cursor),
                    should_auto_split=auto_split,
                )
            )

        logger.info("Remote section detection produced %d sections", len(sections))
        return SectionDetectionResult(
            sections=sections, should_auto_split=auto_split, method=DetectionMethod.LLM
        )

    def single_section(self, text: str) -> SectionDetectionResult:
        classification = self.orchestrator.classify(text)
        section = Section(
            content=text,
            suggested_type=classification.type,
            suggested_tags=extract_tags(text),
            confidence=1.0,
            span=(0, len(text)),
            should_auto_split=False,
        )
        return SectionDetectionResult(
            sections=[section], should_auto_split=False, method=DetectionMethod.NONE
        )
