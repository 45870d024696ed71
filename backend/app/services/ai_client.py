"""
Inference Client – OpenAI-compatible chat completions (DeepSeek by default).

Three call shapes:
  1. analyze_drug          → one JSON object  → DrugAnalysis
  2. analyze_interactions  → JSON with array  → InteractionAnalysis
  3. stream_chat           → incremental text chunks

Every call is one-shot (no SDK retries) under the configured timeout.
Provider failures are translated into the AI error kinds:
timeout, connection failure, error status, malformed output.
"""

import json
import logging
import time
from typing import Iterator, Optional

import httpx
import openai
from openai import OpenAI

from app.errors import (
    AIConnectionError, AIResponseMalformed, AIServiceError, AITimeout, ServiceError,
)
from app.services.ai_schemas import DrugAnalysis, InteractionAnalysis

logger = logging.getLogger("pillgraph.ai")


DRUG_SYSTEM_PROMPT = (
    "You are a professional drug information analyst. Provide accurate, "
    "professional and detailed drug information. For the aiAnalysis field, "
    "write a detailed, structured long-form text covering every aspect of the drug. "
    "Respond with a single JSON object only."
)

DRUG_PROMPT_TEMPLATE = """Analyse the following drug in detail, covering:
1. Generic name and brand names
2. Drug category
3. Main uses and indications
4. Common side effects
5. Contraindications
6. Dosage and administration

Drug name: {name}

Return JSON with exactly these fields:
{{
  "name": "drug name",
  "genericName": "generic name",
  "category": "category",
  "description": "short description (1-2 sentences)",
  "sideEffects": ["side effect 1", "side effect 2"],
  "contraindications": ["contraindication 1", "contraindication 2"],
  "dosage": "dosage and administration",
  "aiAnalysis": "long-form text with these sections:\\n1. Drug identity and basic properties\\n2. Historical origin and background\\n3. Known interactions (what it should and should not be combined with)\\n4. Active ingredients and the role of each\\n5. Mechanism of action (why it works)\\n6. Substitute drugs or alternatives\\n7. Other important information"
}}"""

INTERACTION_SYSTEM_PROMPT = (
    "You are a professional drug interaction analyst. Provide accurate, "
    "professional analysis of drug-drug interactions. Respond with a single JSON object only."
)

INTERACTION_PROMPT_TEMPLATE = """Analyse the interactions between the following drugs:

Drugs: {names}

For every pair of drugs in the list, describe:
1. The interaction type
2. The severity (low/medium/high)
3. A detailed description
4. A clinical recommendation

Use the drug names exactly as written above. Return JSON with this structure:
{{
  "interactions": [
    {{
      "drug1": "drug 1 name",
      "drug2": "drug 2 name",
      "interactionType": "interaction type",
      "severity": "low|medium|high",
      "description": "detailed description",
      "recommendation": "clinical recommendation"
    }}
  ],
  "overallRisk": "low|medium|high",
  "summary": "overall assessment"
}}"""

CHAT_SYSTEM_PROMPT = """You are a medical scientist specialising in pharmacology, with deep knowledge of pharmacology, chemistry and clinical medicine.

Your responsibilities:
1. Give professional, authoritative and detailed answers about drugs.
2. When explaining drug interactions, always describe:
   - the reaction mechanism between the molecules involved
   - the molecular-level cause of side effects
   - the concrete principle behind drugs reinforcing or counteracting each other
   - chemical composition, mechanism of action and clinical significance
3. Use rigorous scientific language while staying easy to understand.
4. Cite relevant research or clinical guidelines where appropriate.
5. Use analogies and step-by-step descriptions for complex chemical mechanisms.

Notes:
- Always stress that the information is for reference only and is not a diagnosis or prescription.
- Advise users to consult a physician or pharmacist before taking any medication.
- For serious interactions, clearly state the risk level."""


class AIClient:
    """Stateless request/response wrapper around the OpenAI SDK client."""

    def __init__(
        self,
        api_key: str,
        base_url: str,
        model: str,
        timeout: float,
        temperature: float = 0.7,
        client: Optional[OpenAI] = None,
    ):
        self.api_key = api_key
        self.base_url = base_url
        self.model = model
        self.timeout = timeout
        self.temperature = temperature
        self._client = client

    @classmethod
    def from_config(cls, config) -> "AIClient":
        return cls(
            api_key=config.AI_API_KEY,
            base_url=config.AI_BASE_URL,
            model=config.AI_MODEL,
            timeout=config.AI_TIMEOUT_SECONDS,
            temperature=config.AI_TEMPERATURE,
        )

    @property
    def client(self) -> OpenAI:
        if self._client is None:
            self._client = OpenAI(
                api_key=self.api_key,
                base_url=self.base_url,
                timeout=self.timeout,
                max_retries=0,
            )
        return self._client

    # ── Public calls ───────────────────────────────────────────────

    def analyze_drug(self, drug_name: str) -> DrugAnalysis:
        payload = self._complete_json(
            "analyze_drug",
            DRUG_SYSTEM_PROMPT,
            DRUG_PROMPT_TEMPLATE.format(name=drug_name),
            params={"drugName": drug_name},
        )
        return DrugAnalysis.from_payload(payload)

    def analyze_interactions(self, drug_names: list[str]) -> InteractionAnalysis:
        payload = self._complete_json(
            "analyze_interactions",
            INTERACTION_SYSTEM_PROMPT,
            INTERACTION_PROMPT_TEMPLATE.format(names=", ".join(drug_names)),
            params={"drugNames": drug_names, "count": len(drug_names)},
        )
        return InteractionAnalysis.from_payload(payload)

    def stream_chat(self, message: str, history: list[dict]) -> Iterator[str]:
        """Yield the model's text chunks as they arrive."""
        messages = [{"role": "system", "content": CHAT_SYSTEM_PROMPT}]
        messages.extend(history)
        messages.append({"role": "user", "content": message})

        started = time.monotonic()
        params = {"historyLength": len(history)}
        logger.info("AI stream started method=stream_chat params=%s", params)
        chunks = 0
        try:
            stream = self.client.chat.completions.create(
                model=self.model,
                messages=messages,
                stream=True,
                temperature=self.temperature,
            )
            for chunk in stream:
                if not chunk.choices:
                    continue
                content = chunk.choices[0].delta.content
                if content:
                    chunks += 1
                    yield content
        except (openai.OpenAIError, httpx.TransportError) as exc:
            raise self._translate(exc, "stream_chat", started, params) from exc

        logger.info(
            "AI stream finished method=stream_chat chunks=%d duration=%dms",
            chunks, _elapsed_ms(started),
        )

    # ── Internals ──────────────────────────────────────────────────

    def _complete_json(self, method: str, system_prompt: str, user_prompt: str, params: dict) -> dict:
        started = time.monotonic()
        logger.info("AI call started method=%s params=%s", method, params)
        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                response_format={"type": "json_object"},
                temperature=self.temperature,
            )
        except (openai.OpenAIError, httpx.TransportError) as exc:
            raise self._translate(exc, method, started, params) from exc

        content = response.choices[0].message.content if response.choices else None
        if not content:
            logger.error("AI call returned no content method=%s", method)
            raise AIResponseMalformed("AI returned an empty response.")
        try:
            payload = json.loads(content)
        except json.JSONDecodeError as exc:
            logger.error("AI call returned invalid JSON method=%s: %s", method, exc)
            raise AIResponseMalformed("AI returned a response that is not valid JSON.") from exc

        logger.info("AI call succeeded method=%s duration=%dms", method, _elapsed_ms(started))
        return payload

    def _translate(self, exc: Exception, method: str, started: float, params: dict) -> ServiceError:
        logger.error(
            "AI call failed method=%s params=%s duration=%dms error=%s",
            method, params, _elapsed_ms(started), exc,
        )
        # Timeouts subclass the connection errors in both libraries, so check them first.
        if isinstance(exc, (openai.APITimeoutError, httpx.TimeoutException)):
            return AITimeout("AI request timed out. Please try again later.")
        if isinstance(exc, (openai.APIConnectionError, httpx.TransportError)):
            return AIConnectionError("Unable to connect to the AI service.")
        if isinstance(exc, openai.APIStatusError):
            return AIServiceError(f"AI service returned an error (status {exc.status_code}).")
        return AIServiceError(f"AI request failed: {exc}")


def _elapsed_ms(started: float) -> int:
    return int((time.monotonic() - started) * 1000)
