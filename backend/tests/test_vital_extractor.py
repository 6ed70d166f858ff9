"""
Unit tests for vital extraction rules
"""

import pytest

from health_wallet.services.vital_extractor import (
    DEFAULT_RULES,
    DIASTOLIC,
    HEART_RATE,
    SUGAR,
    SYSTOLIC,
    ExtractedVital,
    VitalExtractor,
    extract_vitals,
    make_rule,
)


def as_pairs(vitals):
    return [(v.name, v.value) for v in vitals]


# ============================================================================
# BLOOD PRESSURE
# ============================================================================

def test_bp_yields_systolic_and_diastolic_only():
    assert as_pairs(extract_vitals("BP 120/80")) == [(SYSTOLIC, "120"), (DIASTOLIC, "80")]


@pytest.mark.parametrize("text", [
    "Blood pressure: 140/90",
    "bp=140/90",
    "BLOOD PRESSURE 140 / 90",
    "BloodPressure:140/90",
    "BP: 140/90mmHg",
    "BP 140/90 mm Hg",
    "Blood pressure 140/90mmhg",
])
def test_bp_synonyms_and_delimiters(text):
    assert as_pairs(extract_vitals(text)) == [(SYSTOLIC, "140"), (DIASTOLIC, "90")]


def test_bp_inside_other_word_is_ignored():
    assert extract_vitals("BPM 120/80") == []


def test_bp_four_digit_reading_is_ignored():
    assert extract_vitals("BP 120/8000") == []


def test_round_trip_text(sample_report_text):
    assert as_pairs(extract_vitals(sample_report_text)) == [
        (SYSTOLIC, "130"),
        (DIASTOLIC, "85"),
        (SUGAR, "110"),
    ]


# ============================================================================
# FIRST MATCH / ORDER
# ============================================================================

def test_only_first_occurrence_is_used():
    text = "Sugar: 110 (fasting)\n...\nSugar: 145 (post meal)\nBP 120/80 then BP 150/95"
    assert as_pairs(extract_vitals(text)) == [
        (SYSTOLIC, "120"),
        (DIASTOLIC, "80"),
        (SUGAR, "110"),
    ]


def test_output_follows_rule_order_not_document_order():
    text = "Heart Rate 70, Sugar 100, BP 120/80"
    assert [v.name for v in extract_vitals(text)] == [SYSTOLIC, DIASTOLIC, SUGAR, HEART_RATE]


def test_rules_are_independent():
    # A garbled BP does not stop the other rules
    assert as_pairs(extract_vitals("BP 12/ Heart Rate: 64")) == [(HEART_RATE, "64")]


# ============================================================================
# VOCABULARY
# ============================================================================

def test_heart_rate_does_not_feed_other_rules():
    assert as_pairs(extract_vitals("Heart Rate: 72 bpm")) == [(HEART_RATE, "72")]


@pytest.mark.parametrize("text", [
    "Respiratory rate 16",
    "Pulse rate: 80",
    "Patient is well. Temperature 37C.",
    "Sugar-free diet advised",
])
def test_unrelated_vocabulary_yields_nothing(text):
    assert extract_vitals(text) == []


@pytest.mark.parametrize("text", [None, "", "   \n\t  "])
def test_empty_text_yields_empty_result(text):
    assert extract_vitals(text) == []


def test_values_kept_as_matched_text():
    assert as_pairs(extract_vitals("Sugar: 098")) == [(SUGAR, "098")]
    assert as_pairs(extract_vitals("Blood Sugar = 5.60")) == [(SUGAR, "5.60")]


# ============================================================================
# RULE TABLE
# ============================================================================

def test_default_rules_are_immutable_tuple():
    assert isinstance(DEFAULT_RULES, tuple)
    assert [r.name for r in DEFAULT_RULES] == ["Blood Pressure", "Sugar", "Heart Rate"]


def test_custom_rule_table():
    temperature = make_rule("Temperature", r"Temp(?:erature)?", r"(\d+(?:\.\d+)?)", ("Temperature",))
    extractor = VitalExtractor((temperature,))
    assert extractor.extract("Temp: 98.6, BP 120/80") == [ExtractedVital("Temperature", "98.6")]
