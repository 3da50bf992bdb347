"""
Narrative prompts, one per result view.

Each builder receives the view's table as JSON rows plus the insight
summary and returns the analyst prompt sent to the language model.
"""

from typing import Any, Callable, Dict, List

from sqinch import schema
from sqinch.schema import AnalysisView

Rows = List[Dict[str, Any]]

STYLE_GUIDE = (
    "Do not include phrases like 'would you like me to elaborate' or "
    "'here are my recommendations'. Write as a business analyst delivering "
    "findings, not as a conversational assistant."
)


def _mean(rows: Rows, key: str) -> float:
    return sum(r[key] for r in rows) / len(rows)


def foundational_prompt(rows: Rows, summary: Dict[str, Any]) -> str:
    sei = schema.SEI
    top = max(rows, key=lambda p: p[sei])
    bottom = min(rows, key=lambda p: p[sei])
    high = sum(1 for p in rows if p[sei] > 120)
    low = sum(1 for p in rows if p[sei] < 80)

    return f"""Analyze this catalog performance data and provide 2-3 specific space optimization recommendations.

KEY METRICS:
- Top performer: {top[schema.PRODUCT_NAME]} (SEI: {top[sei]:.1f})
- Bottom performer: {bottom[schema.PRODUCT_NAME]} (SEI: {bottom[sei]:.1f})
- Catalog average SEI: {_mean(rows, sei):.1f}
- High performers (SEI >120): {high}/{len(rows)} products
- Underperformers (SEI <80): {low}/{len(rows)} products

Provide actionable recommendations for space reallocation, product positioning, and performance optimization only. Include quantified impact where possible. {STYLE_GUIDE}"""


def segment_prompt(rows: Rows, summary: Dict[str, Any]) -> str:
    top = rows[0]
    lines = "\n".join(
        f"{s['segment']}: {s['weightedAvgSEI']} SEI, ${s['revenuePerSqIn']}/sq in" for s in rows
    )

    return f"""Analyze customer segment performance and provide 2-3 strategic recommendations for circulation and targeting optimization.

SEGMENT PERFORMANCE:
{lines}

Top performing segment: {top['segment']}
- Efficiency: {top['weightedAvgSEI']} SEI
- Revenue density: {top['revenuePerSqIn']}/sq inch
- Customer count: {top['customers']}

Focus on circulation strategy, segment-specific catalog versions, customer acquisition adjustments, and revenue optimization through targeted offerings. {STYLE_GUIDE}"""


def affinity_prompt(rows: Rows, summary: Dict[str, Any]) -> str:
    pairs = "\n".join(
        f"{p['anchorProduct']} + {p['boughtWithProduct']} "
        f"({p['combinedEfficiency']} efficiency, {p['coPurchases']} co-purchases)"
        for p in rows[:3]
    )
    high = summary.get("affinityInsights", {}).get(
        "highEfficiencyPairs",
        sum(1 for p in rows if p["combinedEfficiency"] > 150),
    )

    return f"""Analyze product affinity data and provide 2-3 specific recommendations for catalog layout and cross-merchandising.

TOP PRODUCT AFFINITIES:
{pairs}

ANALYSIS CONTEXT:
- Total product pairs identified: {len(rows)}
- High-efficiency pairs (>150): {high}
- Average combined efficiency: {_mean(rows, 'combinedEfficiency'):.1f}

Provide actionable catalog design and merchandising recommendations focusing on product placement, cross-selling opportunities, and spread design optimization. {STYLE_GUIDE}"""


def profiles_prompt(rows: Rows, summary: Dict[str, Any]) -> str:
    customers = "\n".join(
        f"{c['ageRange']} {c['incomeTier']} Income: {c['revenueWeightedSEI']} SEI, "
        f"{c['totalSpent']} spent, {c['productsBought']} products"
        for c in rows[:5]
    )
    multi = sum(1 for c in rows if c["productsBought"] > 1)

    return f"""Analyze customer efficiency profiles and provide 2-3 strategic recommendations for customer development and personalization.

TOP CUSTOMERS BY EFFICIENCY:
{customers}

CUSTOMER BASE INSIGHTS:
- Average customer SEI: {_mean(rows, 'revenueWeightedSEI'):.1f}
- Multi-product customers: {multi}/{len(rows)} ({multi / len(rows) * 100:.1f}%)
- Total customers analyzed: {len(rows)}

Focus on high-value customer retention strategies, personalized catalog development, converting single-product buyers to multi-product customers, and customer segmentation for premium offerings. {STYLE_GUIDE}"""


PROMPT_BUILDERS: Dict[AnalysisView, Callable[[Rows, Dict[str, Any]], str]] = {
    AnalysisView.FOUNDATIONAL: foundational_prompt,
    AnalysisView.SEGMENT: segment_prompt,
    AnalysisView.AFFINITY: affinity_prompt,
    AnalysisView.PROFILES: profiles_prompt,
}


def build_prompt(view: AnalysisView, rows: Rows, summary: Dict[str, Any]) -> str:
    """
    Render the prompt for a view.

    Raises:
        ValueError: If the view's table has no rows
    """
    view = AnalysisView(view)
    if not rows:
        raise ValueError(f"No {view.value} rows to analyse")
    return PROMPT_BUILDERS[view](rows, summary)
