from __future__ import annotations

from app.models.schemas import GenerateRequest, PersonalizationFacts, Prompt

PROPOSAL_INTRO = """\
You are a professional Upwork cover letter writer. Your task is to create a \
compelling, personalized proposal based on the provided job description."""

PROFILE_PROTOCOL = """\
Instructions for using the profile data, in order of priority:
1. Skills Matching:
   - First identify the skills and technologies the job description requires
   - Compare them with the freelancer's skills before using any other profile detail
   - Lead with skills that directly match, and back each one with a concrete example \
from the experience section
2. Experience Relevance:
   - Focus on the experience most relevant to this specific job
   - Prefer quantifiable achievements (e.g. improved performance by X%, shipped Y projects)
3. Certifications:
   - Mention certifications early in the proposal only if they match the job's domain
   - Otherwise leave them out
4. Portfolio and Social Links:
   - Mention the portfolio, GitHub or LinkedIn only when they plausibly contain work \
relevant to this job
5. Gaps:
   - If no listed skill directly matches the job, frame the proposal around \
transferable skills and the ability to learn quickly
   - Never claim a skill the profile does not list

Weave the profile into a natural narrative. Do not simply list qualifications."""

LETTER_STRUCTURE = """\
Structure the cover letter as follows:
1. Greeting: A short, polite hello addressing the client (use their name if given, \
otherwise a generic greeting).
2. Introduction & Context: Briefly name the job or the main problem the client wants solved.
3. Relevant Skills & Experience: Connect the background directly to the job's \
requirements, with measurable results where possible.
4. Approach & Value: Explain how the project will be tackled and why this is the best fit.
5. Soft Skills & Communication: Reassure the client about clear communication, \
met deadlines and being easy to work with.
6. Call to Action: Politely invite the client to discuss next steps or set up a call.
7. Signature: End with "Best regards," followed by {signature}"""

GUIDELINES = """\
Guidelines:
- Write in a {tone} tone that is engaging and results-focused
- Keep the length between 200-350 words
- Use bullet points sparingly and keep primarily to paragraph form
- Ensure all content is specific to the job description
- Output ONLY the cover letter text, no labels or explanation"""

DIAGRAM_SYSTEM_PROMPT = """\
Create a Mermaid.js flowchart showing the project workflow for this job.
- Start with "graph TB" for top-to-bottom flow
- Include the key steps of the work
- Make decision points explicit, with a labelled branch for each outcome
- End every path in an explicit outcome node
- Use clear, concise labels and valid Mermaid syntax
- Output ONLY the diagram source, no explanation"""

# Order in which facts are listed in the profile block
_FACT_LABELS = (
    ("full_name", "Full Name"),
    ("title", "Professional Title"),
    ("skills", "Skills"),
    ("experience", "Experience"),
    ("certifications", "Certifications"),
    ("portfolio", "Portfolio"),
    ("linkedin", "LinkedIn"),
    ("github", "GitHub"),
)


def _profile_section(facts: PersonalizationFacts) -> str:
    lines = ["Use the following freelancer profile to personalize the proposal:"]
    for field, label in _FACT_LABELS:
        value = getattr(facts, field)
        if value:
            lines.append(f"- {label}: {value}")
    return "\n".join(lines) + "\n\n" + PROFILE_PROTOCOL


def _signature(facts: PersonalizationFacts | None) -> str:
    if facts and facts.full_name:
        return f'"{facts.full_name}"'
    return '"[Your Name]"'


def build_proposal_prompt(
    request: GenerateRequest, facts: PersonalizationFacts | None
) -> Prompt:
    """Assemble the system and user instructions for the cover letter.

    The 200-350 word target is fixed. ``request.max_length`` only sizes the
    backend token allocation and is deliberately not mentioned here.
    """
    if not request.job_description.strip():
        raise ValueError("Job description is required")

    parts = [PROPOSAL_INTRO]
    if facts is not None:
        parts.append(_profile_section(facts))
    parts.append(LETTER_STRUCTURE.format(signature=_signature(facts)))
    parts.append(GUIDELINES.format(tone=request.tone.value))
    system = "\n\n".join(parts)

    user = f"Job Description:\n{request.job_description}"
    if request.key_points:
        bullets = "\n".join(f"- {point}" for point in request.key_points)
        user += f"\n\nKey points to address:\n{bullets}"

    return Prompt(system=system, user=user)


def build_diagram_prompt(job_description: str) -> Prompt:
    if not job_description.strip():
        raise ValueError("Job description is required")
    return Prompt(system=DIAGRAM_SYSTEM_PROMPT, user=job_description)
