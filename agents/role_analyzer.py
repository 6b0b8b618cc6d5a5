"""
Role Analyzer: First stage of the writing pipeline.

Responsibilities:
1. ROLE SELECTION: Ask the model for 2-4 complementary writing roles
2. CATALOG: Offer the role templates as optional raw material
3. BOUNDS: Reject fewer than 2 roles, trim to the effective maximum by priority
4. FALLBACK: Substitute a fixed content writer + editor pair on any failure

Output: RoleAnalysis
"""

import time
from typing import List, Optional

from agents.base import RoleAnalysisError, TextGenerator, WritingConfig
from agents.role_templates import ROLE_TEMPLATES, get_role_template
from agents.role_types import RoleAnalysis, RoleDefinition, UserConstraints
from utils.enhanced_logger import get_logger


FALLBACK_CONFIDENCE = 0.5

ROLE_ANALYZER_SYSTEM_PROMPT = """You are an expert at analyzing writing requests and identifying the optimal combination of writing roles/perspectives to produce high-quality content.

Your task:
1. Understand the writing domain, audience, and purpose of the request
2. Identify 2-4 writing roles that would best serve this request
3. For each role provide:
   - A unique id (snake_case)
   - A descriptive name
   - The perspective/expertise this role brings
   - A prompt template tailored to this specific request
   - Priority (1 = highest)
4. Explain your selection
5. Give a confidence score (0.0-1.0) for the overall selection

### Available role templates (use as-is or adapt)
{catalog}

### Guidelines
- Choose complementary perspectives, not redundant ones
- Consider the domain, target audience, and content goals
- Balance specialist expertise with broad accessibility

Output ONLY valid JSON. No markdown, no explanation outside JSON."""


def _catalog_text() -> str:
    return "\n".join(f"- {role_id}: {role.description}" for role_id, role in ROLE_TEMPLATES.items())


def build_user_prompt(request: str, constraints: Optional[UserConstraints] = None) -> str:
    """Build the user prompt for role analysis."""
    prompt = f"Analyze this writing request and identify optimal roles.\n\n### Request\n{request}"

    if constraints:
        lines = []
        if constraints.max_length:
            lines.append(f"- Maximum length: {constraints.max_length} characters")
        if constraints.tone:
            lines.append(f"- Desired tone: {constraints.tone}")
        if constraints.target_audience:
            lines.append(f"- Target audience: {constraints.target_audience}")
        if constraints.preferred_roles:
            lines.append(f"- User suggested roles: {', '.join(constraints.preferred_roles)}")
            lines.append("  (Consider these suggestions but optimize as needed for best results)")
            for role_id in constraints.preferred_roles:
                template = get_role_template(role_id)
                if template:
                    lines.append(f"  * {role_id} = {template.name}: {template.description}")
        if lines:
            prompt += "\n\n### Constraints\n" + "\n".join(lines)

    prompt += f"""

### Output Format (STRICT JSON)
{{
    "identified_roles": [
        {{
            "id": "role_id_in_snake_case",
            "name": "Role Name",
            "description": "Brief description of this role's perspective",
            "prompt_template": "You are a [role]. Detailed instructions for writing from this perspective",
            "priority": 1
        }}
    ],
    "reasoning": "Why these roles were selected",
    "confidence": 0.85
}}

### Requirements
- identified_roles must have 2-4 items
- priority must be an integer (1, 2, 3 or 4)
- confidence must be between 0.0 and 1.0
- prompt_template should be detailed instructions for that role

Output JSON:"""

    return prompt


def trim_roles(roles: List[RoleDefinition], max_roles: int) -> List[RoleDefinition]:
    """Keep the ``max_roles`` roles with the lowest priority values (stable on ties)."""
    if len(roles) <= max_roles:
        return list(roles)
    return sorted(roles, key=lambda r: r.priority)[:max_roles]


def fallback_role_analysis() -> RoleAnalysis:
    """Fixed two-role analysis used when role analysis fails."""
    return RoleAnalysis(
        identified_roles=[
            RoleDefinition(
                id="content_writer",
                name="Content Writer",
                description="Professional content writer with broad expertise",
                prompt_template="You are a professional content writer. Create clear, well-structured, high-quality content.",
                priority=1
            ),
            RoleDefinition(
                id="editor",
                name="Editor",
                description="Editorial expert ensuring clarity and quality",
                prompt_template="You are an experienced editor. Make the content clear, concise, and polished.",
                priority=2
            ),
        ],
        reasoning="Using fallback roles due to analysis error",
        confidence=FALLBACK_CONFIDENCE
    )


def validate_role_analysis(analysis: RoleAnalysis, min_roles: int = 2, max_roles: int = 4) -> List[str]:
    """
    Check a RoleAnalysis against its invariants.

    Advisory only: returns human-readable violations, empty when valid.
    """
    errors = []
    roles = analysis.identified_roles

    if len(roles) < min_roles:
        errors.append(f"Must have at least {min_roles} roles, got {len(roles)}")
    if len(roles) > max_roles:
        errors.append(f"Must have at most {max_roles} roles, got {len(roles)}")

    role_ids = [r.id for r in roles]
    if len(role_ids) != len(set(role_ids)):
        errors.append("Role IDs must be unique")

    if not 0.0 <= analysis.confidence <= 1.0:
        errors.append("Confidence must be between 0.0 and 1.0")

    for role in roles:
        if not (role.id and role.name and role.description and role.prompt_template):
            errors.append(f"Role {role.id or 'unknown'} is missing required fields")

    return errors


class RoleAnalyzer:
    """
    Role Analyzer: Turns a free-text request into a RoleAnalysis.

    Two failure modes, chosen by ``config.fallback_on_error``:
    - soft (default): any failure returns fallback_role_analysis()
    - hard: the failure propagates to the caller
    """

    def __init__(self, generator: TextGenerator, config: WritingConfig = None):
        self.generator = generator
        self.config = config or WritingConfig()
        self.system_prompt = ROLE_ANALYZER_SYSTEM_PROMPT.format(catalog=_catalog_text())

    def effective_max_roles(self, constraints: Optional[UserConstraints] = None) -> int:
        """The role cap for this request: preferred roles narrow it, never below the minimum."""
        max_roles = self.config.max_roles
        if constraints and constraints.preferred_roles:
            max_roles = min(len(constraints.preferred_roles), max_roles)
        return max(max_roles, self.config.min_roles)

    def analyze(self, request: str, constraints: Optional[UserConstraints] = None) -> RoleAnalysis:
        """
        Determine the writing roles for a request.

        Args:
            request: Natural-language writing request
            constraints: Optional caller constraints (may carry preferred_roles)

        Returns:
            RoleAnalysis with between min_roles and the effective max roles
        """
        print(f"[ROLE_ANALYZER] Analyzing: {request[:50]}...")

        start = time.time()
        fallback = False
        try:
            analysis = self._analyze(request, constraints)
        except Exception as e:
            if not self.config.fallback_on_error:
                raise
            print(f"[ROLE_ANALYZER] Analysis error: {e}")
            print("[ROLE_ANALYZER] Using fallback roles")
            analysis = fallback_role_analysis()
            fallback = True

        duration = time.time() - start

        print(f"[ROLE_ANALYZER] Selected {len(analysis.identified_roles)} roles "
              f"(confidence {analysis.confidence:.2f})")
        for role in analysis.identified_roles:
            print(f"  - [{role.priority}] {role.id}: {role.name}")

        logger = get_logger()
        if logger:
            logger.log_role_analysis(
                roles=[{'id': r.id, 'name': r.name, 'priority': r.priority} for r in analysis.identified_roles],
                reasoning=analysis.reasoning,
                confidence=analysis.confidence,
                fallback=fallback,
                duration=duration
            )

        return analysis

    def _analyze(self, request: str, constraints: Optional[UserConstraints]) -> RoleAnalysis:
        user_prompt = build_user_prompt(request, constraints)

        start = time.time()
        analysis = self.generator.generate_structured(
            self.system_prompt,
            user_prompt,
            RoleAnalysis,
            temperature=self.config.analysis_temperature
        )

        logger = get_logger()
        if logger:
            payload = analysis.model_dump_json(indent=2)
            logger.log_llm_call(
                agent_name="RoleAnalyzer",
                operation="role_analysis",
                system_prompt=self.system_prompt,
                user_prompt=user_prompt,
                raw_output=payload,
                cleaned_output=payload,
                temperature=self.config.analysis_temperature,
                duration=time.time() - start
            )

        # Agent outputs are keyed by role id, so a repeated id is dropped
        roles, seen = [], set()
        for role in analysis.identified_roles:
            if role.id in seen:
                print(f"[ROLE_ANALYZER] Dropping duplicate role id: {role.id}")
                continue
            seen.add(role.id)
            roles.append(role)

        if len(roles) < self.config.min_roles:
            raise RoleAnalysisError(
                f"Role analysis must identify at least {self.config.min_roles} roles, got {len(roles)}"
            )

        max_roles = self.effective_max_roles(constraints)
        if len(roles) > max_roles:
            print(f"[ROLE_ANALYZER] Trimming {len(roles)} roles to {max_roles} by priority")
            roles = trim_roles(roles, max_roles)

        return analysis.model_copy(update={"identified_roles": roles})
