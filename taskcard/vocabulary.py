"""Static lookup tables for task classification.

Keyword vocabularies, complexity markers and the per-level texts used in
reasoning trails, the level guide and task card defaults. All tables are
read-only for the lifetime of the process.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Dict, Iterable, Mapping, Tuple

from .models import LevelProfile, TaskLevel


def _unique(items: Iterable[str]) -> Tuple[str, ...]:
    """Drop repeated entries, keeping first-seen order."""
    seen = set()
    ordered = []
    for item in items:
        key = item.lower()
        if key not in seen:
            seen.add(key)
            ordered.append(item)
    return tuple(ordered)


LEVEL_ORDER: Tuple[TaskLevel, ...] = (
    TaskLevel.STANDARDIZED,
    TaskLevel.INTEGRATION,
    TaskLevel.ARCHITECTURE,
    TaskLevel.INNOVATION,
)

TONE_ORDER: Tuple[str, ...] = ("simple", "medium", "complex", "innovation")
DEFAULT_TONE = "medium"


LEVEL_KEYWORDS: Mapping[TaskLevel, Tuple[str, ...]] = MappingProxyType({
    TaskLevel.STANDARDIZED: _unique([
        # standardized implementation
        "实现", "创建", "添加", "编写", "构建",
        "CRUD", "表单", "页面", "组件", "函数",
        "按钮", "输入", "显示", "列表", "详情",
        "保存", "删除", "更新", "查询", "验证",
        "implement", "create", "add", "build", "write",
        "form", "page", "component", "function", "button",
        "input", "display", "list", "detail", "save",
        "delete", "update", "query", "validate",
    ]),
    TaskLevel.INTEGRATION: _unique([
        # integration and coordination
        "集成", "整合", "对接", "连接", "同步",
        "协调", "配合", "联动", "交互", "通信",
        "流程", "工作流", "状态管理", "数据流",
        "接口", "API", "服务", "中间件",
        "integrate", "connect", "sync", "coordinate",
        "workflow", "state", "dataflow", "interface",
        "API", "service", "middleware", "communication",
    ]),
    TaskLevel.ARCHITECTURE: _unique([
        # architecture and design
        "架构", "设计", "规划", "方案", "策略",
        "选型", "决策", "评估", "分析", "优化",
        "性能", "扩展", "重构", "升级", "迁移",
        "安全", "可靠性", "可维护性", "可扩展性",
        "architecture", "design", "plan", "strategy",
        "selection", "decision", "evaluation", "analysis",
        "optimization", "performance", "scalability",
        "refactor", "upgrade", "migration", "security",
    ]),
    TaskLevel.INNOVATION: _unique([
        # innovation and exploration
        "创新", "探索", "研究", "验证", "实验",
        "概念", "原型", "试验", "调研", "分析",
        "可行性", "评估", "发现", "突破", "革新",
        "新技术", "新方法", "新模式", "前沿",
        "innovation", "explore", "research", "experiment",
        "prototype", "feasibility", "breakthrough",
        "cutting-edge", "novel", "pioneering",
    ]),
})

COMPLEXITY_MARKERS: Mapping[str, Tuple[str, ...]] = MappingProxyType({
    "simple": (
        "简单", "基础", "基本", "标准", "常规",
        "simple", "basic", "standard", "regular", "common",
    ),
    "medium": (
        "中等", "一般", "适中", "常见", "典型",
        "medium", "moderate", "typical", "average",
    ),
    "complex": (
        "复杂", "困难", "高级", "深入", "综合",
        "complex", "difficult", "advanced", "comprehensive",
    ),
    "innovation": (
        "创新", "前沿", "突破", "革命性", "开创性",
        "innovative", "cutting-edge", "breakthrough", "revolutionary",
    ),
})


LEVEL_NAMES: Mapping[TaskLevel, str] = MappingProxyType({
    TaskLevel.STANDARDIZED: "Level 1 Standardized Implementation",
    TaskLevel.INTEGRATION: "Level 2 Integration & Coordination",
    TaskLevel.ARCHITECTURE: "Level 3 Architecture & Design",
    TaskLevel.INNOVATION: "Level 4 Innovation & Exploration",
})

TONE_REASONS: Mapping[str, str] = MappingProxyType({
    "simple": "Low complexity, suitable for standardized implementation",
    "medium": "Moderate complexity",
    "complex": "High complexity, requires architectural thinking or deep consideration",
    "innovation": "Involves innovative exploration, requires experimental methods",
})

LEVEL_RECOMMENDATIONS: Mapping[TaskLevel, str] = MappingProxyType({
    TaskLevel.STANDARDIZED: "Level 1 recommended: a standardized implementation task led by AI",
    TaskLevel.INTEGRATION: "Level 2 recommended: an integration and coordination task needing human-AI collaboration",
    TaskLevel.ARCHITECTURE: "Level 3 recommended: an architecture and design task led by humans",
    TaskLevel.INNOVATION: "Level 4 recommended: an innovation and exploration task led by humans",
})

KEYWORD_REASON_TEMPLATE = "Description contains many keywords related to {level_name}"


LEVEL_PROFILES: Tuple[LevelProfile, ...] = (
    LevelProfile(
        level=TaskLevel.STANDARDIZED,
        name="Standardized Implementation",
        description="AI-led implementation of standardized functionality",
        examples="Component development, CRUD operations, form handling, page layout",
        workflow="AI writes the implementation; humans confirm requirements and check quality",
    ),
    LevelProfile(
        level=TaskLevel.INTEGRATION,
        name="Integration & Coordination",
        description="Human-AI collaboration on system integration",
        examples="Service integration, data synchronization, workflow integration, state management",
        workflow="Humans design the integration, AI helps implement, both debug together",
    ),
    LevelProfile(
        level=TaskLevel.ARCHITECTURE,
        name="Architecture & Design",
        description="Human-led architectural decisions",
        examples="System architecture, technology selection, performance optimization, refactoring plans",
        workflow="Humans analyse and design; AI helps verify and fill in implementation details",
    ),
    LevelProfile(
        level=TaskLevel.INNOVATION,
        name="Innovation & Exploration",
        description="Human-led innovation and research",
        examples="New technology research, proof of concept, user research, business innovation",
        workflow="Humans drive the creative thinking; AI helps gather information and build prototypes",
    ),
)


DEFAULT_BEST_PRACTICES: Mapping[TaskLevel, Tuple[str, ...]] = MappingProxyType({
    TaskLevel.STANDARDIZED: (
        "Follow the coding standards and team conventions",
        "Write clear comments and documentation",
        "Cover the change with thorough unit tests",
        "Use type checking to improve code quality",
    ),
    TaskLevel.INTEGRATION: (
        "Keep interface design consistent",
        "Handle exceptional cases and boundary conditions",
        "Implement appropriate error handling and logging",
        "Consider performance and user experience",
    ),
    TaskLevel.ARCHITECTURE: (
        "Carry out a complete architectural analysis",
        "Consider scalability and maintainability of the system",
        "Evaluate whether the technology choices are sound",
        "Draw up a detailed implementation plan",
    ),
    TaskLevel.INNOVATION: (
        "Do thorough research and investigation",
        "Build proofs of concept and prototypes",
        "Assess technical feasibility and risk",
        "Prepare fallback options",
    ),
})

DEFAULT_TEST_STRATEGIES: Mapping[TaskLevel, str] = MappingProxyType({
    TaskLevel.STANDARDIZED: "Unit tests cover the main functionality; integration tests verify interface correctness",
    TaskLevel.INTEGRATION: "Integration tests verify cross-system interaction; end-to-end tests cover user flows",
    TaskLevel.ARCHITECTURE: "Performance tests validate the architecture; stress tests verify system capacity",
    TaskLevel.INNOVATION: "Proof-of-concept tests, user feedback sessions and A/B tests validate the outcome",
})

DEFAULT_VALIDATION_CHECKLISTS: Mapping[TaskLevel, Tuple[str, ...]] = MappingProxyType({
    TaskLevel.STANDARDIZED: (
        "Code passes all unit tests",
        "Code follows team conventions",
        "Functionality meets the requirements",
        "Code review completed",
    ),
    TaskLevel.INTEGRATION: (
        "Integration tests pass",
        "User flows verified",
        "Performance targets met",
        "Error handling verified",
    ),
    TaskLevel.ARCHITECTURE: (
        "Architecture design document complete",
        "Technology choices confirmed",
        "Implementation plan is feasible",
        "Risk assessment completed",
    ),
    TaskLevel.INNOVATION: (
        "Proof of concept succeeded",
        "Technical feasibility confirmed",
        "User feedback is positive",
        "Business value is clear",
    ),
})


def level_profile(level: int) -> LevelProfile:
    """Return the guide entry for ``level``."""
    task_level = TaskLevel.coerce(level)
    return LEVEL_PROFILES[task_level - 1]


def keyword_table() -> Dict[str, Tuple[str, ...]]:
    """Keyword vocabularies keyed ``level1``..``level4`` for display."""
    return {f"level{int(level)}": LEVEL_KEYWORDS[level] for level in LEVEL_ORDER}
