"""Fixed school reference data."""

from datetime import date

from app.models.student import Grade

# ==========================================
# Exams
# ==========================================

TERMINAL_EXAMS = [
    {"id": "terminal1", "name": "First Terminal Exam"},
    {"id": "terminal2", "name": "Second Terminal Exam"},
    {"id": "terminal3", "name": "Final Terminal Exam"},
]
TERMINAL_EXAM_IDS = [exam["id"] for exam in TERMINAL_EXAMS]
FINAL_EXAM_ID = "terminal3"

# Four-tier qualitative scale for subjects graded without marks
QUALITATIVE_GRADES = ["A", "B", "C", "D"]

PASS_MARK = 33
SPLIT_MARKS_EXAM_PASS_MARK = 20

JUNIOR_GRADES = {Grade.NURSERY, Grade.KINDERGARTEN, Grade.I, Grade.II}
MIDDLE_GRADES = {Grade.III, Grade.IV, Grade.V, Grade.VI, Grade.VII, Grade.VIII}
SENIOR_GRADES = {Grade.IX, Grade.X}


def _subjects(names: list[str], exam_full: int, activity_full: int) -> list[dict]:
    return [
        {
            "name": name,
            "exam_full_marks": exam_full,
            "activity_full_marks": activity_full,
            "grading_mode": "marks",
        }
        for name in names
    ]


_MIDDLE_CORE = ["English", "Mathematics", "Science", "Social Studies", "Mizo"]

DEFAULT_GRADE_DEFINITIONS: dict[Grade, dict] = {
    Grade.NURSERY: {"subjects": _subjects(["Pre-Reading", "Pre-Writing", "Numbers"], 100, 0)},
    Grade.KINDERGARTEN: {"subjects": _subjects(["English", "Mathematics", "General Knowledge"], 100, 0)},
    Grade.I: {"subjects": _subjects(["English", "Mathematics", "Environmental Science", "Mizo"], 100, 0)},
    Grade.II: {"subjects": _subjects(["English", "Mathematics", "Environmental Science", "Mizo"], 100, 0)},
    Grade.III: {"subjects": _subjects(_MIDDLE_CORE, 60, 40)},
    Grade.IV: {"subjects": _subjects(_MIDDLE_CORE, 60, 40)},
    Grade.V: {"subjects": _subjects(_MIDDLE_CORE + ["Hindi"], 60, 40)},
    Grade.VI: {"subjects": _subjects(_MIDDLE_CORE + ["Hindi"], 60, 40)},
    Grade.VII: {"subjects": _subjects(_MIDDLE_CORE + ["Hindi"], 60, 40)},
    Grade.VIII: {"subjects": _subjects(_MIDDLE_CORE + ["Hindi"], 60, 40)},
    Grade.IX: {"subjects": _subjects(_MIDDLE_CORE, 100, 0)},
    Grade.X: {"subjects": _subjects(_MIDDLE_CORE, 100, 0)},
}

# ==========================================
# Fees
# ==========================================

ACADEMIC_MONTHS = [
    "April", "May", "June", "July", "August", "September",
    "October", "November", "December", "January", "February", "March",
]

FEE_STRUCTURE = {
    "set1": {"admission_fee": 5000, "tuition_fee": 1500, "exam_fee": 500},
    "set2": {"admission_fee": 6000, "tuition_fee": 2000, "exam_fee": 600},
    "set3": {"admission_fee": 7000, "tuition_fee": 2500, "exam_fee": 700},
}
FEE_SET1_GRADES = {Grade.NURSERY, Grade.KINDERGARTEN, Grade.I, Grade.II}
FEE_SET2_GRADES = {Grade.III, Grade.IV, Grade.V, Grade.VI}

# ==========================================
# Calendar
# ==========================================

# State government public holidays, merged into the calendar at read time
PUBLIC_HOLIDAYS: list[tuple[date, str]] = [
    (date(2025, 1, 1), "New Year's Day"),
    (date(2025, 1, 11), "Missionary Day"),
    (date(2025, 1, 26), "Republic Day"),
    (date(2025, 2, 20), "State Day"),
    (date(2025, 3, 7), "Chapchar Kut"),
    (date(2025, 4, 18), "Good Friday"),
    (date(2025, 6, 30), "Remna Ni"),
    (date(2025, 8, 15), "Independence Day"),
    (date(2025, 10, 2), "Gandhi Jayanti"),
    (date(2025, 12, 24), "Christmas Eve"),
    (date(2025, 12, 25), "Christmas Day"),
    (date(2025, 12, 31), "Year End Holiday"),
    (date(2026, 1, 1), "New Year's Day"),
    (date(2026, 1, 11), "Missionary Day"),
    (date(2026, 1, 26), "Republic Day"),
    (date(2026, 2, 20), "State Day"),
    (date(2026, 3, 6), "Chapchar Kut"),
    (date(2026, 4, 3), "Good Friday"),
    (date(2026, 6, 30), "Remna Ni"),
    (date(2026, 8, 15), "Independence Day"),
    (date(2026, 10, 2), "Gandhi Jayanti"),
    (date(2026, 12, 24), "Christmas Eve"),
    (date(2026, 12, 25), "Christmas Day"),
    (date(2026, 12, 31), "Year End Holiday"),
]
