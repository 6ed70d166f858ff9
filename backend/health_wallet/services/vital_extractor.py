"""
Vital extraction from recognized report text.

Each rule is a case-insensitive pattern anchored on one vital's name and
its textual synonyms, followed by a delimiter and one or more numeric
groups. Only the first match of each rule is used, and every rule is
evaluated independently, in table order. A composite rule (blood pressure)
maps its groups onto several output vitals.

Values are kept as the matched text so "098" or "5.60" survive as written.
"""

import logging
import re
from dataclasses import dataclass
from typing import Optional

logger = logging.getLogger(__name__)

SYSTOLIC = "Systolic"
DIASTOLIC = "Diastolic"
SUGAR = "Sugar"
HEART_RATE = "Heart Rate"

_DELIMITER = r"[\s:=]+"


@dataclass(frozen=True)
class ExtractedVital:
    name: str
    value: str


@dataclass(frozen=True)
class ExtractionRule:
    """
    A named extraction rule.

    `outputs` lists the vital produced by each capture group, in group order.
    """
    name: str
    pattern: re.Pattern
    outputs: tuple[str, ...]

    def apply(self, text: str) -> list[ExtractedVital]:
        match = self.pattern.search(text)
        if not match:
            return []
        return [
            ExtractedVital(name=vital_name, value=match.group(index))
            for index, vital_name in enumerate(self.outputs, start=1)
        ]


def make_rule(name: str, synonyms: str, value_pattern: str, outputs: tuple[str, ...]) -> ExtractionRule:
    """Build a rule from a synonym alternation and the numeric value pattern."""
    regex = rf"\b(?:{synonyms})\b{_DELIMITER}{value_pattern}"
    return ExtractionRule(name=name, pattern=re.compile(regex, re.IGNORECASE), outputs=outputs)


DEFAULT_RULES: tuple[ExtractionRule, ...] = (
    make_rule(
        "Blood Pressure",
        r"Blood\s*pressure|BP",
        r"(\d{2,3})\s*/\s*(\d{2,3})(?!\d)",
        (SYSTOLIC, DIASTOLIC),
    ),
    make_rule("Sugar", r"(?:Blood\s*)?Sugar", r"(\d+(?:\.\d+)?)", (SUGAR,)),
    make_rule("Heart Rate", r"Heart\s*Rate", r"(\d+)", (HEART_RATE,)),
)


class VitalExtractor:
    def __init__(self, rules: tuple[ExtractionRule, ...] = DEFAULT_RULES):
        self.rules = tuple(rules)

    def extract(self, text: Optional[str]) -> list[ExtractedVital]:
        if not text or not text.strip():
            return []
        vitals: list[ExtractedVital] = []
        for rule in self.rules:
            vitals.extend(rule.apply(text))
        logger.debug("Extracted %d vitals: %s", len(vitals), vitals)
        return vitals


def extract_vitals(text: Optional[str], rules: tuple[ExtractionRule, ...] = DEFAULT_RULES) -> list[ExtractedVital]:
    return VitalExtractor(rules).extract(text)
