"""Task analyzer - scores request complexity and picks a worker tier."""

import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Optional

from .models import TaskContext, WorkerTier

if TYPE_CHECKING:
    from .plans.models import Plan


@dataclass(frozen=True)
class TaskAnalysis:
    intent: str
    complexity: int  # 1 to 10
    estimated_time: str  # fast, medium, slow
    required_tools: list[str]
    suggested_tier: WorkerTier
    can_parallelize: bool
    needs_planning: bool
    confidence: float  # 0.1 to 1.0
    plan: Optional["Plan"] = field(default=None, compare=False)


class TaskAnalyzer:
    """Routes a request by pattern-matching its text and attached context.

    Deterministic and side-effect free: the same text and context always
    produce the same analysis.
    """

    # Conversational phrasing and single quick-lookup verbs
    QUICK_PATTERNS = [
        re.compile(r"\b(hi|hello|hey|greetings?|thanks?|thank\s*you|bye|goodbye)\b", re.I),
        re.compile(r"\b(ok|okay|yes|no|sure|cool|great|awesome|nice)\b", re.I),
        re.compile(r"\b(search|find|grep|look\s*for)\b", re.I),
        re.compile(r"\b(read|cat|show|display|print)\b", re.I),
        re.compile(r"\b(list|ls|dir)\b", re.I),
        re.compile(r"\b(fetch|get|download)\b", re.I),
        re.compile(r"\b(typo|spelling|syntax)\b", re.I),
        re.compile(r"\b(simple|quick|fast|easy)\b", re.I),
        re.compile(r"\b(format|lint|prettier)\b", re.I),
        re.compile(r"\b(rename|move|copy|delete)\b", re.I),
        re.compile(r"\bwhat\s+(is|are|does)\b", re.I),
        re.compile(r"\b(check|verify|validate)\b", re.I),
    ]

    # Planning, architecture, security and refactor phrasing
    PLANNING_PATTERNS = [
        re.compile(r"\b(plan|architect|design|strategy)\b", re.I),
        re.compile(r"\b(complex|complicated|intricate)\b", re.I),
        re.compile(r"\b(refactor|restructure|reorganize)\b", re.I),
        re.compile(r"\b(system|architecture|infrastructure)\b", re.I),
        re.compile(r"\b(critical|important|crucial|essential)\b", re.I),
        re.compile(r"\b(decide|choose|evaluate|compare)\b", re.I),
        re.compile(r"\b(migrate|upgrade|overhaul)\b", re.I),
        re.compile(r"\b(implement\s+entire|build\s+complete|create\s+full)\b", re.I),
        re.compile(r"\b(breaking\s+changes?|major\s+update)\b", re.I),
        re.compile(r"\b(security|authentication|authorization)\b", re.I),
    ]

    PLANNING_HINT = re.compile(r"\b(plan|architect|design|strategy|decompose)\b", re.I)

    # Multi-file and cross-cutting work, with the complexity each adds
    COMPLEXITY_PATTERNS = [
        (re.compile(r"\b(multiple|several|many|all)\s+(files?|components?|modules?)\b", re.I), 3),
        (re.compile(r"\b(across|throughout|entire)\s+(codebase|project|repo)\b", re.I), 4),
        (re.compile(r"\b(api|endpoint|route|controller)\b", re.I), 2),
        (re.compile(r"\b(database|schema|migration|model)\b", re.I), 3),
        (re.compile(r"\b(test|spec|coverage)\b", re.I), 2),
        (re.compile(r"\b(error\s*handling|exception|try\s*catch)\b", re.I), 2),
        (re.compile(r"\b(state|context|store|redux)\b", re.I), 2),
        (re.compile(r"\b(async|await|promise|callback)\b", re.I), 1),
        (re.compile(r"\b(type|interface|generic)\b", re.I), 1),
        (re.compile(r"\b(integration|e2e|end.to.end)\b", re.I), 3),
    ]

    INTENTS = [
        (re.compile(r"\b(fix|bug|error|issue|problem)\b", re.I), "bug_fix"),
        (re.compile(r"\b(add|implement|create|new|build)\b", re.I), "feature"),
        (re.compile(r"\b(refactor|clean|improve|optimize)\b", re.I), "refactor"),
        (re.compile(r"\b(test|spec|coverage)\b", re.I), "testing"),
        (re.compile(r"\b(document|comment|explain)\b", re.I), "documentation"),
        (re.compile(r"\b(search|find|locate|where)\b", re.I), "search"),
        (re.compile(r"\b(read|show|display|what)\b", re.I), "read"),
        (re.compile(r"\b(run|execute|deploy|start)\b", re.I), "execution"),
        (re.compile(r"\b(plan|design|architect)\b", re.I), "planning"),
        (re.compile(r"\b(review|check|verify|validate)\b", re.I), "review"),
    ]

    # Capability hints handed to the planner
    TOOL_INDICATORS = {
        "Bash": [
            re.compile(r"\b(run|execute|npm|yarn|pnpm|bun|git|docker|make)\b", re.I),
            re.compile(r"\b(install|build|test|deploy|start|stop)\b", re.I),
        ],
        "Read": [
            re.compile(r"\b(read|show|display|cat|view)\b", re.I),
            re.compile(r"\b(file|code|content|source)\b", re.I),
        ],
        "Write": [
            re.compile(r"\b(write|create|add|new)\b", re.I),
            re.compile(r"\b(file|component|module|class)\b", re.I),
        ],
        "Edit": [
            re.compile(r"\b(edit|modify|change|update|fix)\b", re.I),
            re.compile(r"\b(replace|remove|delete|insert)\b", re.I),
        ],
        "Grep": [
            re.compile(r"\b(search|find|grep|locate|look\s*for)\b", re.I),
            re.compile(r"\b(pattern|regex|match)\b", re.I),
        ],
        "WebFetch": [
            re.compile(r"\b(fetch|download|http|api|url)\b", re.I),
            re.compile(r"\b(web|online|remote)\b", re.I),
        ],
        "WebSearch": [
            re.compile(r"\b(search|google|look\s*up|research)\b", re.I),
            re.compile(r"\b(documentation|docs|how\s*to)\b", re.I),
        ],
    }

    PARALLEL_HINTS = [
        re.compile(r"\b(and|also|additionally|plus)\b", re.I),
        re.compile(r"\b(multiple|several|each|all)\b", re.I),
    ]

    MAX_COMPLEXITY = 10

    def __init__(self, planning_threshold: int = 8):
        self.planning_threshold = planning_threshold

    def analyze(self, text: str, context: Optional[TaskContext] = None) -> TaskAnalysis:
        """
        Analyze a request and decide how it should be routed.

        Always returns an analysis with a suggested tier, even when planning
        is recommended, so callers can fall back if planning is skipped.
        """
        complexity = 1

        for pattern, score in self.COMPLEXITY_PATTERNS:
            if pattern.search(text):
                complexity += score

        complexity += self._context_complexity(context)

        if len(text) > 500:
            complexity += 1
        if len(text) > 1000:
            complexity += 1

        complexity = min(complexity, self.MAX_COMPLEXITY)

        is_quick = self._matches_any(self.QUICK_PATTERNS, text)
        if is_quick and complexity < 5:
            complexity = max(1, complexity - 2)

        is_planning = self._matches_any(self.PLANNING_PATTERNS, text)
        if is_planning:
            complexity = max(complexity, self.planning_threshold)

        suggested_tier = self._pick_tier(complexity, is_quick, is_planning)

        needs_planning = (
            complexity >= self.planning_threshold
            or is_planning
            or bool(self.PLANNING_HINT.search(text))
        )

        if complexity <= 3:
            estimated_time = "fast"
        elif complexity <= 6:
            estimated_time = "medium"
        else:
            estimated_time = "slow"

        return TaskAnalysis(
            intent=self._classify_intent(text),
            complexity=complexity,
            estimated_time=estimated_time,
            required_tools=self._detect_tools(text),
            suggested_tier=suggested_tier,
            can_parallelize=self._matches_any(self.PARALLEL_HINTS, text),
            needs_planning=needs_planning,
            confidence=self._confidence(text, complexity, is_quick, is_planning),
        )

    def _context_complexity(self, context: Optional[TaskContext]) -> int:
        """Extra complexity from attached files and constraint lists."""
        if context is None:
            return 0
        extra = 0
        if len(context.files) > 3:
            extra += min(len(context.files) - 3, 3)
        if context.constraints:
            extra += 1
        return extra

    def _pick_tier(self, complexity: int, is_quick: bool, is_planning: bool) -> WorkerTier:
        if is_planning or complexity >= self.planning_threshold:
            return WorkerTier.PLANNING
        if is_quick and complexity <= 5:
            return WorkerTier.FAST
        return WorkerTier.STANDARD

    def _classify_intent(self, text: str) -> str:
        for pattern, intent in self.INTENTS:
            if pattern.search(text):
                return intent
        return "general"

    def _detect_tools(self, text: str) -> list[str]:
        return [
            tool for tool, patterns in self.TOOL_INDICATORS.items()
            if self._matches_any(patterns, text)
        ]

    def _confidence(self, text: str, complexity: int, is_quick: bool, is_planning: bool) -> float:
        confidence = 0.5

        # Clear indicators increase confidence
        if is_quick:
            confidence += 0.2
        if is_planning:
            confidence += 0.2

        if len(text) < 20:
            confidence -= 0.2
        if len(text) > 2000:
            confidence -= 0.1

        # Mid-range scores are the least certain
        if 4 <= complexity <= 6:
            confidence -= 0.1

        return round(max(0.1, min(1.0, confidence)), 2)

    @staticmethod
    def _matches_any(patterns: list[re.Pattern], text: str) -> bool:
        return any(p.search(text) for p in patterns)


_default_analyzer = TaskAnalyzer()


def analyze_task(text: str, context: Optional[TaskContext] = None) -> TaskAnalysis:
    """Analyze with the default thresholds."""
    return _default_analyzer.analyze(text, context)


def is_quick_task(text: str) -> bool:
    """Quick check if a request can skip orchestration and go to a fast worker."""
    if len(text) < 50:
        return True
    return (
        TaskAnalyzer._matches_any(TaskAnalyzer.QUICK_PATTERNS, text)
        and not TaskAnalyzer._matches_any(TaskAnalyzer.PLANNING_PATTERNS, text)
    )


def needs_opus_planning(text: str) -> bool:
    """Quick check if a request needs planning-grade decomposition."""
    return (
        TaskAnalyzer._matches_any(TaskAnalyzer.PLANNING_PATTERNS, text)
        or len(text) > 1000
        or bool(re.search(r"\b(entire|complete|full|whole)\s+(system|project|codebase)\b", text, re.I))
    )
