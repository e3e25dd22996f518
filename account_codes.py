"""
Five-segment Maine account codes: fund-program-function-object-location.

A code is only usable when it matches NNNN-NNNN-NNNN-NNNN-NNN exactly; anything
else is rejected and the row carrying it is skipped by the engines.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from maine_shared import ACCOUNT_CODE_PATTERN, FUNCTION_NAMES, FUNCTION_TO_CATEGORY


class FundingCategory(str, Enum):
    REGULAR_INSTRUCTION = "regularInstruction"
    SPECIAL_EDUCATION = "specialEducation"
    CAREER_TECHNICAL = "careerTechnical"
    OTHER_INSTRUCTION = "otherInstruction"
    STUDENT_STAFF_SUPPORT = "studentStaffSupport"
    SYSTEM_ADMIN = "systemAdmin"
    SCHOOL_ADMIN = "schoolAdmin"
    TRANSPORTATION = "transportation"
    FACILITIES_MAINT = "facilitiesMaint"
    DEBT_SERVICE = "debtService"
    ALL_OTHER = "allOther"

    @property
    def display_name(self) -> str:
        return CATEGORY_NAMES[self]


CATEGORY_NAMES = {
    FundingCategory.REGULAR_INSTRUCTION: "Regular Instruction",
    FundingCategory.SPECIAL_EDUCATION: "Special Education",
    FundingCategory.CAREER_TECHNICAL: "Career & Technical Education",
    FundingCategory.OTHER_INSTRUCTION: "Other Instruction",
    FundingCategory.STUDENT_STAFF_SUPPORT: "Student & Staff Support",
    FundingCategory.SYSTEM_ADMIN: "System Administration",
    FundingCategory.SCHOOL_ADMIN: "School Administration",
    FundingCategory.TRANSPORTATION: "Transportation & Buses",
    FundingCategory.FACILITIES_MAINT: "Facilities Maintenance",
    FundingCategory.DEBT_SERVICE: "Debt Service",
    FundingCategory.ALL_OTHER: "All Other Expenditures",
}


@dataclass(frozen=True)
class AccountCode:
    fund: str
    program: str
    function: str
    object: str
    location: str

    @property
    def code(self) -> str:
        return "-".join((self.fund, self.program, self.function, self.object, self.location))

    @property
    def funding_category(self) -> "FundingCategory":
        return category_of(self.function)

    def __str__(self) -> str:
        return self.code


def parse_account_code(code) -> Optional[AccountCode]:
    """
    Split a literal account code into its five segments.

    Args:
        code: Cell value (usually a string); surrounding whitespace is ignored

    Returns:
        AccountCode, or None when the value is not a well-formed code
    """
    if code is None:
        return None
    s = str(code).strip()
    if not ACCOUNT_CODE_PATTERN.fullmatch(s):
        return None
    return AccountCode(*s.split("-"))


def is_account_code(value) -> bool:
    return parse_account_code(value) is not None


def category_of(function_segment) -> FundingCategory:
    key = str(function_segment or "").strip()
    return FundingCategory(FUNCTION_TO_CATEGORY.get(key, FundingCategory.ALL_OTHER.value))


def function_name(function_segment) -> str:
    key = str(function_segment or "").strip()
    return FUNCTION_NAMES.get(key, f"Function {key}")
