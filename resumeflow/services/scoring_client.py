"""
Resume Scoring Client

The downstream AI collaborator: takes extracted resume text, returns
structured JSON (ATS score, issues, suggestions). DeepSeek exposes an
OpenAI-compatible API, so we use the openai library.

COST NOTES:
- Only the first 4000 characters of a resume are sent
- Low temperature for consistent structured output
- JSON response format requested from the model
"""
import json
from typing import Optional

from openai import OpenAI

from resumeflow.core.config import Settings

RESUME_PROMPT_CHARS = 4000

SYSTEM_PROMPT = (
    "You are an expert ATS (Applicant Tracking System) analyst and resume coach. "
    "Provide detailed, actionable feedback in JSON format."
)

OUTPUT_FORMAT = """Provide the response in JSON format:
{
  "atsScore": <number 0-100>,
  "issues": [{"category": "formatting|keywords|content|contact", "issue": "description", "severity": "high|medium|low"}],
  "suggestions": [{"priority": "high|medium|low", "suggestion": "specific action", "impact": "expected improvement"}],
  "keywordGaps": ["keyword1"],
  "strengths": ["strength1"]
}"""


class ScoringClient:
    """
    Wrapper for the scoring model.
    """

    def __init__(self, api_key: str, base_url: str, model: str = "deepseek-chat"):
        self.client = OpenAI(api_key=api_key, base_url=base_url)
        self.model = model

    @classmethod
    def from_settings(cls, settings: Settings) -> Optional["ScoringClient"]:
        if not settings.deepseek_api_key:
            return None
        return cls(
            api_key=settings.deepseek_api_key,
            base_url=settings.deepseek_base_url,
            model=settings.scoring_model
        )

    def _call_api(self, system_prompt: str, user_content: str, max_tokens: int = 1500) -> str:
        response = self.client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_content}
            ],
            max_tokens=max_tokens,
            temperature=0.3,
            response_format={"type": "json_object"}
        )
        return response.choices[0].message.content

    def _extract_json(self, text: str) -> dict:
        """
        Extract JSON from API response.
        Handles cases where model wraps JSON in markdown code blocks.
        """
        text = text.strip()
        if text.startswith("```json"):
            text = text[7:]
        if text.startswith("```"):
            text = text[3:]
        if text.endswith("```"):
            text = text[:-3]

        return json.loads(text.strip())

    def score_resume(self, resume_text: str, target_role: Optional[str] = None) -> dict:
        field = target_role or "the candidate's field"
        prompt = (
            "Analyze this resume and provide:\n"
            "1. ATS Score (0-100) based on formatting and structure, keyword optimization for "
            f"{field}, quantified achievements, "
            "clear contact information, appropriate length and sections\n"
            "2. Specific issues (missing sections, formatting problems, keyword gaps, vague statements)\n"
            "3. Prioritized improvement suggestions\n\n"
            f"Resume Content:\n{resume_text[:RESUME_PROMPT_CHARS]}\n\n"
            f"{OUTPUT_FORMAT}"
        )
        return self._extract_json(self._call_api(SYSTEM_PROMPT, prompt))
