# backend/quizapp/core/openai_tutor.py

import logging

from openai import AsyncOpenAI

from .openai_qg import OpenAICollaborator

logger = logging.getLogger("quiz.tutor")


# ------------------------------------------------------------
# Prompt templates
# ------------------------------------------------------------
HINT_SYSTEM_PROMPT = (
    "You are a quiz assistant who gives hints.\n"
    "Rules:\n"
    "- Reply with ONE short, subtle sentence.\n"
    "- Never state or paraphrase the answer.\n"
    "- No preamble, no markdown."
)

EXPLAIN_SYSTEM_PROMPT = (
    "You are a friendly tutor reviewing a quiz answer.\n"
    "Rules:\n"
    "- Explain briefly why the correct answer is correct.\n"
    "- Touch on why the user's answer is wrong.\n"
    "- Keep it concise and easy to understand."
)


class _ChatCollaborator(OpenAICollaborator):
    system_prompt = ""

    def __init__(
        self,
        api_key: str | None = None,
        client: AsyncOpenAI | None = None,
        model_name: str = "gpt-4o-mini",
    ):
        super().__init__(api_key, client)
        self.model_name = model_name

    async def _complete(self, user_prompt: str) -> str:
        resp = await self.client.chat.completions.create(
            model=self.model_name,
            messages=[
                {"role": "system", "content": self.system_prompt},
                {"role": "user", "content": user_prompt},
            ],
        )
        return (resp.choices[0].message.content or "").strip()


class OpenAIHintGenerator(_ChatCollaborator):
    system_prompt = HINT_SYSTEM_PROMPT

    async def generate(self, question_text: str) -> str:
        # Only the question text is sent; the model never sees options or the answer
        hint = await self._complete(f'Question: "{question_text}"')
        logger.debug(f"Hint generated ({len(hint)} chars)")
        return hint


class OpenAIExplanationGenerator(_ChatCollaborator):
    system_prompt = EXPLAIN_SYSTEM_PROMPT

    async def generate(self, question_text: str, correct_text: str, user_text: str) -> str:
        user_prompt = (
            "A user answered a quiz question incorrectly.\n"
            f'Question: "{question_text}"\n'
            f'Correct Answer: "{correct_text}"\n'
            f'User\'s Answer: "{user_text}"'
        )
        explanation = await self._complete(user_prompt)
        logger.debug(f"Explanation generated ({len(explanation)} chars)")
        return explanation
