"""
Robust JSON Parser for LLM Responses

Question generation asks for JSON output, but providers without a strict
JSON mode still wrap it in markdown or leave small syntax errors behind.

Strategies (in order):
1. Direct JSON parse
2. Extract from a markdown code block
3. Outermost object/array extraction
4. Light repair (trailing commas, single quotes, Python literals)
5. LLM-based repair (only when a client is given)
"""
import json
import logging
import re
from typing import Any, List, Optional, Type, TypeVar, Union

from openai import AsyncOpenAI, OpenAIError
from pydantic import BaseModel, ValidationError


logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)

MARKDOWN_BLOCK_PATTERNS = [
    re.compile(r"```json\s*([\s\S]*?)\s*```"),
    re.compile(r"```\s*([\s\S]*?)\s*```"),
]

REPAIRS = [
    (re.compile(r",\s*}"), "}"),
    (re.compile(r",\s*]"), "]"),
    (re.compile(r"([{,]\s*)(\w+)(\s*:)"), r'\1"\2"\3'),
    (re.compile(r"'([^']*)'"), r'"\1"'),
    (re.compile(r"\bNone\b"), "null"),
    (re.compile(r"\bTrue\b"), "true"),
    (re.compile(r"\bFalse\b"), "false"),
]


class JSONParseError(Exception):
    """Raised when all parsing strategies fail."""
    def __init__(self, message: str, original_content: str, attempts: List[str]):
        super().__init__(message)
        self.original_content = original_content
        self.attempts = attempts


class RobustJSONParser:
    """
    JSON parser with fallback strategies for LLM output.

    Usage:
        parser = RobustJSONParser()
        data = parser.parse(llm_response)
        question = parser.parse_and_validate(llm_response, TrueFalseQuestion)
    """

    def __init__(self, client: Optional[AsyncOpenAI] = None, repair_model: str = "gpt-4o-mini"):
        self.client = client
        self.repair_model = repair_model

    def parse(self, content: Optional[str]) -> Any:
        if not content or not content.strip():
            raise JSONParseError("Empty LLM response", original_content=content or "", attempts=[])

        attempts = []
        strategies = [
            ("direct_parse", self._try_direct_parse),
            ("markdown_extraction", self._try_markdown_extraction),
            ("regex_extraction", self._try_regex_extraction),
            ("json_repair", self._try_json_repair),
        ]
        for name, strategy in strategies:
            result = strategy(content)
            if result is not None:
                if attempts:
                    logger.debug(f"[JSON_PARSER] Parsed with {name} after {len(attempts)} failed attempts")
                return result
            attempts.append(f"{name}: failed")

        raise JSONParseError(
            f"Failed to parse JSON after {len(attempts)} attempts",
            original_content=content,
            attempts=attempts,
        )

    def parse_and_validate(self, content: str, model: Type[T]) -> T:
        return model.model_validate(self.parse(content))

    async def parse_with_llm_fallback(
        self,
        content: str,
        model: Optional[Type[T]] = None,
        max_retries: int = 1,
    ) -> Union[Any, T]:
        """Local strategies first, then ask the LLM to fix the JSON."""
        try:
            parsed = self.parse(content)
            return model.model_validate(parsed) if model else parsed
        except JSONParseError:
            if not self.client:
                raise

            for attempt in range(max_retries):
                repaired = await self._llm_repair(content, model)
                if not repaired:
                    continue
                try:
                    parsed = json.loads(repaired)
                    return model.model_validate(parsed) if model else parsed
                except (json.JSONDecodeError, ValidationError):
                    logger.warning(f"[JSON_PARSER] LLM repair attempt {attempt + 1} still invalid")
            raise

    def _try_direct_parse(self, content: str) -> Optional[Any]:
        try:
            return json.loads(content.strip())
        except json.JSONDecodeError:
            return None

    def _try_markdown_extraction(self, content: str) -> Optional[Any]:
        for pattern in MARKDOWN_BLOCK_PATTERNS:
            match = pattern.search(content)
            if match:
                try:
                    return json.loads(match.group(1).strip())
                except json.JSONDecodeError:
                    continue
        return None

    def _try_regex_extraction(self, content: str) -> Optional[Any]:
        for pattern in (r"\{[\s\S]*\}", r"\[[\s\S]*\]"):
            match = re.search(pattern, content)
            if match:
                try:
                    return json.loads(match.group())
                except json.JSONDecodeError:
                    continue
        return None

    def _try_json_repair(self, content: str) -> Optional[Any]:
        match = re.search(r"\{[\s\S]*\}", content)
        repaired = match.group() if match else content.strip()
        for pattern, replacement in REPAIRS:
            repaired = pattern.sub(replacement, repaired)
        try:
            return json.loads(repaired)
        except json.JSONDecodeError:
            return None

    async def _llm_repair(self, content: str, model: Optional[Type[BaseModel]]) -> Optional[str]:
        schema_hint = f"\n\nExpected schema:\n{model.model_json_schema()}" if model else ""
        prompt = (
            "The following text should be valid JSON but has syntax errors.\n"
            "Fix the JSON and return ONLY the corrected JSON, nothing else.\n\n"
            f"Original content:\n```\n{content[:2000]}\n```{schema_hint}"
        )
        try:
            response = await self.client.chat.completions.create(
                model=self.repair_model,
                messages=[{"role": "user", "content": prompt}],
                temperature=0.0,
                max_tokens=2000,
            )
        except OpenAIError as e:
            logger.warning(f"[JSON_PARSER] LLM repair failed: {e}")
            return None
        return (response.choices[0].message.content or "").strip()
