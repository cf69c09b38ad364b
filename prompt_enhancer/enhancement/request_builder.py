"""Builds the chat completion request that asks the model to rewrite a prompt."""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


DEFAULT_MODEL = "gpt-4o-mini"
DEFAULT_MAX_TOKENS = 1000
DEFAULT_TEMPERATURE = 0.3

# Default system prompt for prompt enhancement
ENHANCEMENT_SYSTEM_PROMPT = """You are a prompt enhancement specialist. Your job is to take user prompts and make them clearer, more detailed, and better structured for AI code generation.

When enhancing prompts, you should:
1. Add missing context (programming language, framework, libraries)
2. Clarify vague requirements
3. Structure the request logically
4. Add expected output format details
5. Include error handling requirements if applicable
6. Make assumptions explicit
7. Add relevant constraints or best practices

Keep the enhanced prompt focused and actionable. Don't make it unnecessarily long, but ensure it's comprehensive enough for high-quality AI responses.

Return only the enhanced prompt text, nothing else."""

USER_INSTRUCTION = "Please enhance this prompt:"


class EnhancementRequest(BaseModel):
    """One outbound enhancement request. Built fresh per call."""

    model_config = ConfigDict(frozen=True)

    prompt_text: str = Field(description="Original prompt, already validated")
    model: str = Field(default=DEFAULT_MODEL, description="Upstream model name")
    max_tokens: int = Field(default=DEFAULT_MAX_TOKENS, gt=0, description="Maximum output tokens")
    temperature: float = Field(default=DEFAULT_TEMPERATURE, ge=0.0, le=2.0, description="Sampling temperature")
    system_prompt: str = Field(default=ENHANCEMENT_SYSTEM_PROMPT, description="System instruction")

    def messages(self) -> list[dict[str, str]]:
        """System instruction followed by the user's prompt."""
        return [
            {"role": "system", "content": self.system_prompt},
            {"role": "user", "content": f"{USER_INSTRUCTION}\n\n{self.prompt_text}"},
        ]

    def to_payload(self) -> dict[str, Any]:
        """JSON body for the chat completions endpoint."""
        return {
            "model": self.model,
            "messages": self.messages(),
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
        }


def build_request(
    prompt_text: str,
    model: str = DEFAULT_MODEL,
    max_tokens: int = DEFAULT_MAX_TOKENS,
    temperature: float = DEFAULT_TEMPERATURE,
    system_prompt: Optional[str] = None,
) -> EnhancementRequest:
    """Assemble an enhancement request from validated prompt text.

    Args:
        prompt_text: Validated prompt text, embedded verbatim.
        model: Model to use for enhancement.
        max_tokens: Maximum tokens in response.
        temperature: Model temperature (lower = more deterministic).
        system_prompt: Override for the default system instruction.

    Returns:
        Immutable EnhancementRequest.
    """
    return EnhancementRequest(
        prompt_text=prompt_text,
        model=model,
        max_tokens=max_tokens,
        temperature=temperature,
        system_prompt=system_prompt or ENHANCEMENT_SYSTEM_PROMPT,
    )
