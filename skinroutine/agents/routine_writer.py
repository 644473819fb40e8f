"""
Routine Writer Agent — phrases a routine the engine has already chosen.

Takes the PatientProfile and the RecommendationResult, returns usage
instructions, tips and a short clinical rationale. It never picks, drops or
reprices products; apply_phrasing enforces that.
"""

import os
from dataclasses import dataclass

from pydantic import BaseModel, Field
from pydantic_ai import Agent, RunContext

from skinroutine.config import Settings
from skinroutine.errors import PhrasingMismatchError
from skinroutine.schemas import PatientProfile, RecommendationResult


# ── Output schema ───────────────────────────────────────────────────────────


class ProductPhrasing(BaseModel):
    product_id: str
    usage_instructions: str = Field(description="How and when to apply, 1-2 sentences")


class RoutinePhrasing(BaseModel):
    products: list[ProductPhrasing]
    tips: list[str] = Field(default_factory=list)
    clinical_reasoning: str


@dataclass
class RoutineWriterDeps:
    profile: PatientProfile
    result: RecommendationResult


routine_writer_agent = Agent(
    deps_type=RoutineWriterDeps,
    output_type=RoutinePhrasing,
)


@routine_writer_agent.system_prompt
async def build_system_prompt(ctx: RunContext[RoutineWriterDeps]) -> str:
    p = ctx.deps.profile
    r = ctx.deps.result

    profile_lines = [
        f"Skin type: {p.skin_type.value}",
        f"Sensitivity: {p.sensitivity.value}",
        f"Acne: {p.acne_status.value}",
        f"Age: {p.age_bracket.value}",
        f"Concerns: {', '.join(p.all_concerns) if p.all_concerns else 'none specified'}",
        f"Time per routine: {p.time_commitment.value}",
    ]
    safety = p.safety.conditions + p.safety.medications + p.safety.allergies
    if safety:
        profile_lines.append(f"Safety flags: {', '.join(safety)}")
    profile_str = "\n".join(f"  - {line}" for line in profile_lines)

    product_lines = []
    for item in r.products:
        line = (
            f"  - [{item.product_id}] {item.product_name}: {item.role.value}, "
            f"targets {item.target_concern} (${item.price})"
        )
        if item.cannot_mix_with:
            line += f"; do not layer with {', '.join(item.cannot_mix_with)}"
        product_lines.append(line)
    product_str = "\n".join(product_lines)
    tips_str = "\n".join(f"  - {tip}" for tip in r.tips) or "  - none"

    return f"""You are a skincare consultant writing up a routine that has ALREADY been chosen.

PATIENT:
{profile_str}

CHOSEN PRODUCTS (in routine order):
{product_str}

TOTAL: ${r.total_cost} of a ${r.budget} budget

DRAFT TIPS:
{tips_str}

YOUR TASK:
1. For EVERY product above, and only those, write usage_instructions keyed by its exact product_id
   and repeat any "do not layer with" warning in that product's instructions
2. Do NOT add, remove, substitute or reprice products
3. Rewrite the draft tips in a warm, plain voice; keep their meaning
4. clinical_reasoning: one short paragraph on why this routine suits this patient"""


def apply_phrasing(result: RecommendationResult, phrasing: RoutinePhrasing) -> RecommendationResult:
    """Merge phrasing into a copy of result. Products, prices and total are untouched."""
    chosen = result.product_ids
    phrased = {item.product_id: item.usage_instructions for item in phrasing.products}

    unexpected = [pid for pid in phrased if pid not in chosen]
    missing = [pid for pid in chosen if pid not in phrased]
    if unexpected or missing:
        raise PhrasingMismatchError(unexpected, missing)

    products = [
        item.model_copy(update={"usage_instructions": phrased[item.product_id]})
        for item in result.products
    ]
    return result.model_copy(update={
        "products": products,
        "tips": phrasing.tips or result.tips,
        "clinical_reasoning": phrasing.clinical_reasoning,
    })


async def write_routine(
    profile: PatientProfile,
    result: RecommendationResult,
    settings: Settings,
) -> RecommendationResult:
    if settings.claude_api_key and not os.environ.get("ANTHROPIC_API_KEY"):
        os.environ["ANTHROPIC_API_KEY"] = settings.claude_api_key

    run = await routine_writer_agent.run(
        "Write up my skincare routine.",
        deps=RoutineWriterDeps(profile=profile, result=result),
        model=settings.writer_model,
    )
    return apply_phrasing(result, run.output)
