"""
Field mappings for the two Tally forms.

When a form is edited, update its key map here. Keys that no longer exist
are harmless: the label keywords still pick the field up.
"""
from admitlead.mapping.field_resolver import ByKey, ByLabelKeyword, FieldMapping

LEAD_UTM_PARAMS = ("utm_source", "utm_medium", "utm_campaign", "utm_term", "utm_content")
C_LEAD_UTM_PARAMS = ("utm_source", "utm_medium", "utm_campaign")


def lead_form_mapping() -> FieldMapping:
    """Consultation request form (ordinary leads)."""
    return FieldMapping(strategies=(
        ByKey.from_dict({
            "question_g01o6D": "parent_name",
            "question_y6Ra5X": "parent_phone",
            "question_XDkbPL": "student_grade",
            "question_8Kyl4z": "desired_track",
            "question_0xyWRB": "desired_timing",
            "question_zqo65M": "question_context",
        }),
        ByLabelKeyword.from_dict({
            "parent_name": ["성함", "이름", "학부모"],
            "parent_phone": ["전화번호", "연락처", "phone"],
            "student_grade": ["학년", "grade"],
            "desired_track": ["희망계열", "계열", "track"],
            "desired_timing": ["시간대", "상담 시기", "timing"],
            "question_context": ["궁금", "문의", "question"],
            "region": ["지역", "거주지", "region"],
        }),
    ))


def c_lead_form_mapping() -> FieldMapping:
    """C-level form. No stable keys recorded yet, so labels do all the work."""
    return FieldMapping(strategies=(
        ByKey.from_dict({}),
        ByLabelKeyword.from_dict({
            "parent_name": ["성함", "이름", "학부모"],
            "parent_phone": ["전화번호", "연락처", "phone"],
            "student_grade": ["학년", "grade"],
            "desired_track": ["희망계열", "계열", "track"],
            "region": ["지역", "거주지", "region"],
            "question_context": ["궁금", "문의", "question", "내용"],
        }),
    ))
