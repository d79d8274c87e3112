"""
Detect schedule-like content in arbitrary text, e.g. text found on the clipboard.

Five independent signals are looked for: dates, durations, task lists,
project keywords and Mermaid Gantt syntax. Each found signal adds its weight
to a confidence score in the range [0, 1]. This is a heuristic, not a
probabilistic model. The weights live in SIGNAL_WEIGHTS and
COMBINATION_BONUSES, so the scoring can be tested without any text.

extract_preview() gives a rough idea of what an import would produce:
number of tasks, section names, date range, and warnings.

PROMPT> python -m ganttsyntax.detect.schedule_detector
"""
import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Literal, Optional
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

class SignalName(str, Enum):
    DATE = "date"
    DURATION = "duration"
    TASK_LIST = "task_list"
    PROJECT_KEYWORD = "project_keyword"
    MERMAID_SYNTAX = "mermaid_syntax"

SIGNAL_WEIGHTS: dict[SignalName, float] = {
    SignalName.MERMAID_SYNTAX: 0.5,
    SignalName.DATE: 0.25,
    SignalName.TASK_LIST: 0.2,
    SignalName.DURATION: 0.15,
    SignalName.PROJECT_KEYWORD: 0.15,
}

# Extra weight when both signals are present.
COMBINATION_BONUSES: list[tuple[SignalName, SignalName, float]] = [
    (SignalName.DATE, SignalName.TASK_LIST, 0.1),
    (SignalName.DURATION, SignalName.TASK_LIST, 0.1),
]

HIGH_CONFIDENCE_THRESHOLD = 0.6
MEDIUM_CONFIDENCE_THRESHOLD = 0.3
DEFAULT_SCHEDULE_THRESHOLD = 0.3
MIN_SCHEDULE_TEXT_LENGTH = 10

MONTHS = r"(?:Jan|Feb|Mar|Apr|May|Jun|Jul|Aug|Sep|Oct|Nov|Dec)"

DATE_PATTERNS: list[re.Pattern] = [
    re.compile(r"\d{4}-\d{2}-\d{2}"),  # ISO: 2024-01-15
    re.compile(r"\d{1,2}/\d{1,2}/\d{2,4}"),  # US/EU: 1/15/24, 15/1/2024
    re.compile(MONTHS + r"[a-z]*\s+\d{1,2}(?:,?\s*\d{4})?", re.IGNORECASE),  # Jan 15, 2024
    re.compile(r"\d{1,2}(?:st|nd|rd|th)?\s+" + MONTHS + r"[a-z]*", re.IGNORECASE),  # 15th January
    re.compile(r"Q[1-4]\s*['’]?\d{2,4}", re.IGNORECASE),  # Q1 2024, Q2'24
    re.compile(r"Week\s*\d{1,2}", re.IGNORECASE),  # Week 12
]

DURATION_PATTERNS: list[re.Pattern] = [
    re.compile(r"\d+\s*(?:days?|weeks?|months?|hours?|hrs?)", re.IGNORECASE),  # 5 days, 2 weeks
    re.compile(r"\d+[dwmh]\b"),  # 5d, 2w, 1m
    re.compile(r"\d+\s*-\s*\d+\s*(?:days?|weeks?)", re.IGNORECASE),  # 3-5 days
]

TASK_LIST_PATTERNS: list[re.Pattern] = [
    re.compile(r"^[-•*]\s+.+", re.MULTILINE),  # - Task, • Task, * Task
    re.compile(r"^\d+[.)]\s+.+", re.MULTILINE),  # 1. Task, 2) Task
    re.compile(r"^(?:task|todo|milestone|phase|sprint|step)[\s:]", re.MULTILINE | re.IGNORECASE),  # Task: Design
    re.compile(r"^\s*\[[ x]?\]\s+.+", re.MULTILINE),  # [ ] Task, [x] Done
]

PROJECT_KEYWORDS: list[str] = [
    'deadline',
    'due date',
    'due:',
    'milestone',
    'deliverable',
    'kickoff',
    'launch',
    'phase',
    'sprint',
    'iteration',
    'depends on',
    'blocked by',
    'after',
    'before',
    'start date',
    'end date',
    'timeline',
    'schedule',
    'project',
    'task',
    'release',
    'target',
    'eta',
    'estimated',
]

GANTT_KEYWORD_LINE = re.compile(r"^\s*gantt\s*$", re.MULTILINE)

MERMAID_PATTERNS: list[re.Pattern] = [
    GANTT_KEYWORD_LINE,
    re.compile(r"^\s*title\s+.+$", re.MULTILINE),
    re.compile(r"^\s*section\s+.+$", re.MULTILINE),
    re.compile(r":\s*\w+,\s*\d{4}-\d{2}-\d{2}"),
]

BULLET_ITEM = re.compile(r"^[-•*]\s+\S")
NUMBERED_ITEM = re.compile(r"^\d+[.)]\s+\S")
MERMAID_TASK_LINE = re.compile(r"^\s+\S.*:\s*\w*,?\s*\w+,")
SECTION_HEADING = re.compile(r"(?:^|\n)\s*(?:section|phase|##?)\s*[:\-]?\s*(.+)", re.IGNORECASE)
ISO_DATE = re.compile(r"\d{4}-\d{2}-\d{2}")

NON_TASK_LINE_PREFIXES = ('#', '%%', 'gantt', 'title', 'section', 'dateFormat', 'axisFormat', 'excludes')

WARNING_NO_DATES = "No dates detected - will start from today"
WARNING_NO_DURATIONS = "No durations detected - will estimate based on task complexity"
WARNING_NO_TASKS = "No tasks detected - content may need more structure"

@dataclass(frozen=True)
class SignalMatch:
    """Outcome of one signal test. The span and text of the first match help when debugging a score."""
    matched: bool
    span: Optional[tuple[int, int]] = None
    text: Optional[str] = None

NO_MATCH = SignalMatch(matched=False)

def _first_match(patterns: list[re.Pattern], text: str) -> SignalMatch:
    for pattern in patterns:
        match = pattern.search(text)
        if match is not None:
            return SignalMatch(matched=True, span=match.span(), text=match.group(0))
    return NO_MATCH

def find_date_pattern(text: str) -> SignalMatch:
    return _first_match(DATE_PATTERNS, text)

def find_duration_pattern(text: str) -> SignalMatch:
    return _first_match(DURATION_PATTERNS, text)

def find_task_list_pattern(text: str) -> SignalMatch:
    return _first_match(TASK_LIST_PATTERNS, text)

def find_project_keyword(text: str) -> SignalMatch:
    """Case-insensitive substring match against PROJECT_KEYWORDS."""
    lower_text = text.lower()
    for keyword in PROJECT_KEYWORDS:
        index = lower_text.find(keyword)
        if index >= 0:
            return SignalMatch(matched=True, span=(index, index + len(keyword)), text=text[index:index + len(keyword)])
    return NO_MATCH

def find_mermaid_syntax(text: str) -> SignalMatch:
    return _first_match(MERMAID_PATTERNS, text)

SIGNAL_PREDICATES: dict[SignalName, Callable[[str], SignalMatch]] = {
    SignalName.DATE: find_date_pattern,
    SignalName.DURATION: find_duration_pattern,
    SignalName.TASK_LIST: find_task_list_pattern,
    SignalName.PROJECT_KEYWORD: find_project_keyword,
    SignalName.MERMAID_SYNTAX: find_mermaid_syntax,
}

def score_signals(
    flags: dict[SignalName, bool],
    weights: dict[SignalName, float] = SIGNAL_WEIGHTS,
    bonuses: list[tuple[SignalName, SignalName, float]] = COMBINATION_BONUSES,
) -> float:
    """Weighted sum of the signals that fired, clamped to [0, 1]. Missing flags count as False."""
    score = sum(weight for name, weight in weights.items() if flags.get(name, False))
    for first, second, bonus in bonuses:
        if flags.get(first, False) and flags.get(second, False):
            score += bonus
    return max(0.0, min(1.0, score))

class ScheduleSignals(BaseModel):
    has_date_patterns: bool
    has_duration_patterns: bool
    has_task_list_patterns: bool
    has_project_keywords: bool
    has_mermaid_syntax: bool
    confidence: float = Field(ge=0.0, le=1.0)
    matches: dict[SignalName, SignalMatch] = Field(default_factory=dict, exclude=True)

class DateRange(BaseModel):
    start: str
    end: str

class PreviewResult(BaseModel):
    task_count: int
    sections: list[str]
    date_range: Optional[DateRange]
    confidence: Literal['high', 'medium', 'low']
    warnings: list[str]
    is_mermaid: bool

def detect_signals(text: str) -> ScheduleSignals:
    """Run every signal test on the text and score the result."""
    matches = {name: predicate(text) for name, predicate in SIGNAL_PREDICATES.items()}
    flags = {name: match.matched for name, match in matches.items()}
    confidence = score_signals(flags)
    fired = [name.value for name, flag in flags.items() if flag]
    logger.debug(f"detect_signals: fired={fired!r} confidence={confidence:.2f}")
    return ScheduleSignals(
        has_date_patterns=flags[SignalName.DATE],
        has_duration_patterns=flags[SignalName.DURATION],
        has_task_list_patterns=flags[SignalName.TASK_LIST],
        has_project_keywords=flags[SignalName.PROJECT_KEYWORD],
        has_mermaid_syntax=flags[SignalName.MERMAID_SYNTAX],
        confidence=confidence,
        matches=matches,
    )

def is_likely_schedule(text: str, threshold: float = DEFAULT_SCHEDULE_THRESHOLD) -> bool:
    if not text or len(text.strip()) < MIN_SCHEDULE_TEXT_LENGTH:
        return False
    return detect_signals(text).confidence >= threshold

def confidence_level(confidence: float) -> Literal['high', 'medium', 'low']:
    if confidence >= HIGH_CONFIDENCE_THRESHOLD:
        return 'high'
    if confidence >= MEDIUM_CONFIDENCE_THRESHOLD:
        return 'medium'
    return 'low'

def count_task_lines(lines: list[str]) -> int:
    """
    Lines that look like a task: bullet or numbered list items, or indented Mermaid task lines.
    If there are none, every non-empty line that isn't a heading, comment or directive is counted.
    """
    count = 0
    for line in lines:
        trimmed = line.strip()
        if BULLET_ITEM.match(trimmed) or NUMBERED_ITEM.match(trimmed) or MERMAID_TASK_LINE.match(line):
            count += 1
    if count > 0:
        return count

    return sum(
        1 for line in lines
        if line.strip() and not line.strip().startswith(NON_TASK_LINE_PREFIXES)
    )

def extract_section_names(text: str) -> list[str]:
    """Names from 'section X', 'phase X', '# X' and '## X' lines. Without duplicates, in order of appearance."""
    sections: list[str] = []
    for match in SECTION_HEADING.finditer(text):
        name = match.group(1).strip()
        if name and name not in sections:
            sections.append(name)
    return sections

def extract_date_range(text: str) -> Optional[DateRange]:
    """The earliest and latest ISO date in the text. ISO dates sort chronologically as strings."""
    iso_dates = ISO_DATE.findall(text)
    if not iso_dates:
        return None
    return DateRange(start=min(iso_dates), end=max(iso_dates))

def extract_preview(text: str) -> PreviewResult:
    signals = detect_signals(text)
    is_mermaid = signals.has_mermaid_syntax and GANTT_KEYWORD_LINE.search(text) is not None

    task_count = count_task_lines(text.split('\n'))

    warnings: list[str] = []
    if not signals.has_date_patterns and not is_mermaid:
        warnings.append(WARNING_NO_DATES)
    if not signals.has_duration_patterns and not is_mermaid:
        warnings.append(WARNING_NO_DURATIONS)
    if task_count == 0:
        warnings.append(WARNING_NO_TASKS)

    return PreviewResult(
        task_count=task_count,
        sections=extract_section_names(text),
        date_range=extract_date_range(text),
        confidence=confidence_level(signals.confidence),
        warnings=warnings,
        is_mermaid=is_mermaid,
    )

if __name__ == "__main__":
    from ganttsyntax.utils.dedent_strip import dedent_strip

    logging.basicConfig(level=logging.DEBUG)

    text = dedent_strip("""
        ## Phase 1: Discovery
        - Stakeholder interviews, 5 days
        - Requirements document due 2024-02-01
        ## Phase 2: Build
        - Backend sprint, 2 weeks
        - Launch on 2024-03-15
    """)
    print(f"is_likely_schedule: {is_likely_schedule(text)}")
    print(extract_preview(text).model_dump_json(indent=2))
