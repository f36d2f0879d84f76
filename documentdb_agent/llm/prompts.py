"""Prompt templates for the planner and synthesizer agents."""

from abc import ABC, abstractmethod
from typing import Any

from documentdb_agent.documents.formatting import top_blocks

SEARCH_TOOL_NAME = "search_hotels_collection"

SEARCH_TOOL_DESCRIPTION = """REQUIRED TOOL - You MUST call this tool for EVERY hotel search request. This is the ONLY way to search the hotel database.

Performs vector similarity search on the Hotels collection in Azure DocumentDB (MongoDB compatible).

INPUT REQUIREMENTS:
- query (string, REQUIRED): Natural language search query describing desired hotel characteristics. Should be detailed and specific (e.g., "budget hotel near downtown with parking and wifi" not just "hotel").
- nearestNeighbors (integer, REQUIRED): Number of results to return (1-20). Use 3-5 for specific requests, 10-15 for broader searches.

SEARCH BEHAVIOR:
- Uses semantic vector search to find hotels matching the query description
- Returns hotels ranked by similarity score
- Includes hotel details: name, description, category, tags, rating, location, parking info

MANDATORY: Every user request about finding, searching, or recommending hotels REQUIRES calling this tool. Do not attempt to answer without calling this tool first."""


class PromptTemplate(ABC):
    """Abstract base class for prompt templates."""

    system_prompt: str

    @abstractmethod
    def format(self, **kwargs: Any) -> str:
        """Format the user message with provided variables."""
        ...


class PlannerPromptTemplate(PromptTemplate):
    """Prompt for the planner, which must turn a request into one tool call."""

    DEFAULT_SYSTEM_PROMPT = f"""You are a hotel search planner. Your job is to help users find hotels by calling the search tool.

CRITICAL INSTRUCTION: You MUST call the "{SEARCH_TOOL_NAME}" tool for every request. This is the ONLY way to search the database.

When you call the tool, use these parameters:
- query: A clear, detailed natural language description of what the user is looking for. Expand vague requests with synonyms and specifics; never pass the user's words through unchanged (e.g., "nice hotel" -> "hotel with high ratings, good reviews, and quality amenities").
- nearestNeighbors: Number of results (1-20). Use 3-5 for specific requests, 10-15 for broader searches.

EXAMPLES of how you should call the tool:
- User: "cheap hotel" -> Call tool with query: "budget-friendly hotel with good value and affordable rates", nearestNeighbors: 10
- User: "hotel near downtown with parking" -> Call tool with query: "hotel near downtown with good parking and wifi", nearestNeighbors: 5

IMPORTANT: Always call the tool. Do not provide answers without calling the tool first."""

    DEFAULT_USER_TEMPLATE = (
        'Search for hotels matching this request: "{query}". '
        "Use nearestNeighbors={nearest_neighbors}."
    )

    def __init__(
        self,
        system_prompt: str | None = None,
        user_template: str | None = None,
    ) -> None:
        self.system_prompt = system_prompt or self.DEFAULT_SYSTEM_PROMPT
        self.user_template = user_template or self.DEFAULT_USER_TEMPLATE

    def format(self, **kwargs: Any) -> str:
        """Format the user message.

        Args:
            **kwargs: Must include 'query' and 'nearest_neighbors'.
        """
        return self.user_template.format(**kwargs)


class SynthesizerPromptTemplate(PromptTemplate):
    """Prompt for the synthesizer, scoped to the top search results."""

    TOP_RESULTS = 3

    DEFAULT_SYSTEM_PROMPT = """You are an expert hotel recommendation assistant using vector search results.
Only use the TOP 3 results provided. Do not request additional searches or call other tools.

GOAL: Provide a concise comparative recommendation to help the user choose between the top 3 options.

REQUIREMENTS:
- Compare only the top 3 results across the most important attributes: rating, score, location, price-level (if available), and key amenities (parking, wifi, pool).
- Identify the main tradeoffs in one short sentence per tradeoff.
- Give a single clear recommendation with one short justification sentence.
- Provide up to two alternative picks (one sentence each) explaining when they are preferable.

FORMAT CONSTRAINTS:
- Plain text only (no markdown).
- Keep the entire response under 220 words.
- Use simple bullets or numbered lists and short sentences (preferably <25 words per sentence).
- Preserve hotel names exactly as provided in the tool summary.

Do not add extra commentary, marketing language, or follow-up questions. If information is missing and necessary to choose, state it in one sentence and still provide the best recommendation based on available data."""

    DEFAULT_USER_TEMPLATE = """User asked: {query}

Tool summary:
{tool_summary}

Analyze the TOP 3 results by COMPARING them across all attributes (rating, score, tags, parking, location, category).

Structure your response:
1. COMPARISON SUMMARY: Compare the top 3 options highlighting key differences and tradeoffs
2. BEST OVERALL: Recommend the single best option with clear reasoning
3. ALTERNATIVE PICKS: Briefly explain when the other options might be preferred (e.g., "Choose X if budget is priority" or "Choose Y if location matters most")

Your goal is to help the user DECIDE between the options, not just describe them.

Format your response using plain text (NO markdown formatting like ** or ###). Use simple numbered lists and use the exact hotel names from the tool summary (preserve original capitalization)."""

    def __init__(
        self,
        system_prompt: str | None = None,
        user_template: str | None = None,
        top_results: int | None = None,
    ) -> None:
        self.system_prompt = system_prompt or self.DEFAULT_SYSTEM_PROMPT
        self.user_template = user_template or self.DEFAULT_USER_TEMPLATE
        self.top_results = top_results or self.TOP_RESULTS

    def format(self, **kwargs: Any) -> str:
        """Format the user message.

        Args:
            **kwargs: Must include 'query' and 'tool_summary'.
        """
        return self.user_template.format(**kwargs)

    def build_prompt(self, query: str, tool_output: str) -> tuple[str, str]:
        """Build the synthesizer prompt from the planner's tool output.

        Only the first ``top_results`` record blocks are embedded.

        Returns:
            Tuple of (system_prompt, user_prompt).
        """
        tool_summary = top_blocks(tool_output, self.top_results)
        return self.system_prompt, self.format(query=query, tool_summary=tool_summary)
