# services/maturity_engine/definitions.py
# Static definitions for the AI maturity assessment: questions, weights, levels
# and the recommendation lookup tables.

# --- Questions ---
# `id` doubles as the weighting key, `dimension` is the label shown to the user
# and the key into the recommendation tables.
MATURITY_QUESTIONS = [
    {"id": "tech_awareness", "dimension": "技术与工具", "text": "您的机构目前对AI技术的认知和应用情况是？"},
    {"id": "data_management", "dimension": "数据与资产", "text": "您的机构在数据管理和资产化方面的现状是？"},
    {"id": "workflow_integration", "dimension": "流程与工作", "text": "AI与您机构核心工作流程的融合程度如何？"},
    {"id": "team_capability", "dimension": "人才与组织", "text": "您的团队在AI能力建设方面处于什么阶段？"},
    {"id": "strategy_value", "dimension": "战略与价值", "text": "AI在您机构的战略定位和价值衡量如何？"},
    {"id": "content_production", "dimension": "内容生产", "text": "AI在您的内容生产环节发挥什么作用？"},
    {"id": "audience_engagement", "dimension": "用户互动", "text": "在用户互动和服务方面，AI的应用情况如何？"},
    {"id": "decision_making", "dimension": "决策支持", "text": "AI在您的编辑决策和运营决策中起什么作用？"},
    {"id": "resource_investment", "dimension": "资源投入", "text": "您的机构在AI转型方面的资源投入情况？"},
    {"id": "future_planning", "dimension": "未来规划", "text": "对于AI转型的未来规划，您的机构处于什么状态？"},
]

# --- Weights ---
# Unlisted question ids weigh 1.0.
DEFAULT_WEIGHT = 1.0

DIMENSION_WEIGHTS = {
    "tech_awareness": 1.2,        # 技术与工具
    "data_management": 1.1,       # 数据与资产
    "workflow_integration": 1.3,  # 流程与工作
    "team_capability": 1.0,       # 人才与组织
    "strategy_value": 1.1,        # 战略与价值
    "content_production": 1.0,    # 内容生产
    "audience_engagement": 0.9,   # 用户互动
    "decision_making": 1.0,       # 决策支持
    "resource_investment": 0.8,   # 资源投入
    "future_planning": 0.9,       # 未来规划
}

MIN_ANSWER_SCORE = 1
MAX_ANSWER_SCORE = 5

# --- Levels ---
# Declaration order matters: ranges touch at their boundaries and the first
# matching level wins.
LEVEL_DEFINITIONS = [
    {
        "level": "L1",
        "name": "观察与感知阶段",
        "score_range": [1.0, 1.5],
        "color": "#FF6B6B",
        "description": "您的机构目前处于AI认知的初期阶段，对AI有一定了解但尚未开始实质性应用。这是一个很好的起点，关键是要建立正确的认知并消除对AI的恐惧。",
        "characteristics": [
            "AI认知处于概念阶段",
            "缺乏系统性的AI应用",
            "主要关注新闻和趋势",
            "组织内部缺乏AI共识",
        ],
        "recommendations": [
            "组织AI认知培训，建立全员基础认知",
            "关注行业AI应用案例，学习最佳实践",
            "制定AI转型的初步规划和预算",
            "选择1-2个低风险场景进行试点",
        ],
        "next_steps": [
            "建立AI学习小组",
            "参加行业AI会议和培训",
            "制定AI转型路线图",
            "寻找合适的AI工具试点",
        ],
    },
    {
        "level": "L2",
        "name": "工具化应用阶段",
        "score_range": [1.5, 2.5],
        "color": "#FFB800",
        "description": "您的机构已经开始零散地使用AI工具，员工有了初步的实践经验。现在需要将这些分散的应用整合起来，形成更系统的能力。",
        "characteristics": [
            "员工开始自发使用AI工具",
            "应用场景相对分散",
            "缺乏统一的管理和标准",
            "效果评估不够系统",
        ],
        "recommendations": [
            "统一AI工具的选型和采购，避免重复投资",
            "开展全员AI工具使用培训",
            "建立AI应用的最佳实践分享机制",
            "选择核心业务流程进行AI改造试点",
        ],
        "next_steps": [
            "制定AI工具使用规范",
            "建立内部AI应用案例库",
            "设立AI应用效果评估机制",
            "推进跨部门AI协作",
        ],
    },
    {
        "level": "L3",
        "name": "流程化融合阶段",
        "score_range": [2.5, 3.5],
        "color": "#17A2B8",
        "description": "恭喜！您的机构已经将AI有机融入到具体业务流程中，形成了标准化的人机协作模式。这是一个重要的里程碑，接下来要考虑更大范围的系统性应用。",
        "characteristics": [
            "AI已融入标准业务流程",
            "形成了人机协作模式",
            "有明确的应用标准和规范",
            "开始产生可量化的效益",
        ],
        "recommendations": [
            "扩大AI应用的业务范围，实现跨部门协同",
            "建设统一的AI能力平台或中台",
            "建立AI应用效果的量化评估体系",
            "培养专业的AI应用和管理人才",
        ],
        "next_steps": [
            "构建AI能力中台",
            "建立AI效果评估体系",
            "培养AI专业人才",
            "探索AI驱动的业务创新",
        ],
    },
    {
        "level": "L4",
        "name": "平台化驱动阶段",
        "score_range": [3.5, 4.5],
        "color": "#28A745",
        "description": "优秀！您的机构已经建立了系统性的AI能力，实现了组织级的效率变革。现在可以考虑如何利用AI开创新的业务模式和价值创造方式。",
        "characteristics": [
            "建立了统一的AI平台",
            "实现了组织级的效率提升",
            "AI成为核心竞争优势",
            "开始探索新的商业模式",
        ],
        "recommendations": [
            "探索AI驱动的新业务模式和营收渠道",
            "建设面向外部的AI服务能力",
            "成为行业AI转型的标杆和引领者",
            "建立AI创新的持续迭代机制",
        ],
        "next_steps": [
            "开发AI驱动的新产品",
            "建立AI生态合作伙伴关系",
            "输出AI转型经验和方法论",
            "持续投入AI前沿技术研发",
        ],
    },
    {
        "level": "L5",
        "name": "生态化创新阶段",
        "score_range": [4.5, 5.0],
        "color": "#6F42C1",
        "description": "卓越！您的机构已经达到了AI应用的最高水平，AI成为了驱动业务创新和生态构建的核心引擎。您已经是行业的领跑者！",
        "characteristics": [
            "AI成为核心业务引擎",
            "构建了完整的AI生态",
            "引领行业AI发展方向",
            "实现了AI的商业化变现",
        ],
        "recommendations": [
            "持续引领行业AI应用的创新方向",
            "建设开放的AI生态和合作伙伴网络",
            "输出AI转型的方法论和最佳实践",
            "探索AI在媒体行业的前沿应用场景",
        ],
        "next_steps": [
            "引领行业AI标准制定",
            "建设AI开放平台",
            "培养行业AI人才",
            "探索AGI在媒体的应用",
        ],
    },
]

# --- Recommendation lookup tables (keyed by dimension label) ---
WEAKNESS_RECOMMENDATIONS = {
    "技术与工具": ["加强AI技术培训和工具选型", "建立技术评估和试点机制"],
    "数据与资产": ["完善数据治理体系", "建设数据资产管理平台"],
    "流程与工作": ["梳理核心业务流程", "设计AI融入的标准化流程"],
    "人才与组织": ["制定AI人才培养计划", "建立AI学习和分享文化"],
    "战略与价值": ["明确AI转型战略目标", "建立AI价值评估体系"],
    "内容生产": ["引入AI内容生产工具", "建立AI辅助的内容工作流"],
    "用户互动": ["部署智能客服系统", "建设用户画像和推荐系统"],
    "决策支持": ["建设数据分析平台", "培养数据驱动决策文化"],
    "资源投入": ["制定AI投资规划", "建立AI项目ROI评估机制"],
    "未来规划": ["制定中长期AI发展规划", "建立AI创新实验机制"],
}

OPPORTUNITY_RECOMMENDATIONS = {
    "技术与工具": ["探索前沿AI技术应用", "建设AI技术中台"],
    "数据与资产": ["开发数据产品和服务", "建设智能数据分析平台"],
    "流程与工作": ["推进流程智能化改造", "建立AI驱动的自动化流程"],
    "人才与组织": ["建立AI专业团队", "推进组织数字化转型"],
    "战略与价值": ["探索AI商业模式创新", "建立AI价值创造体系"],
    "内容生产": ["建设智能内容生产平台", "探索AI原创内容"],
    "用户互动": ["建设智能化用户服务体系", "开发个性化内容推荐"],
    "决策支持": ["建设智能决策支持系统", "开发预测分析能力"],
    "资源投入": ["加大AI核心技术投入", "建立AI投资基金"],
    "未来规划": ["制定AI生态发展战略", "建立AI创新孵化平台"],
}

MAX_RECOMMENDATIONS = 6

# --- Industry benchmarks ---
INDUSTRY_BENCHMARKS = {
    "L1": {"percentile": 20, "description": "处于行业起步阶段"},
    "L2": {"percentile": 40, "description": "达到行业平均水平"},
    "L3": {"percentile": 65, "description": "超过行业平均水平"},
    "L4": {"percentile": 85, "description": "处于行业领先地位"},
    "L5": {"percentile": 95, "description": "行业顶尖水平"},
}
