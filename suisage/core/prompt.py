"""Builds the single planning instruction sent to the LLM for each query."""

from typing import List

from .symbols import SymbolResolver
from .tools import ToolDefinition, ToolRegistry

PLANNER_PROMPT = """You are SuiSage, a Sui blockchain DeFi expert. Answer questions about markets on Sui and use tools when live data is needed.

Available Tools:
{tools}

Supported Coins:
{coins}

Query: {query}

Instructions:
1. Pool rankings:
   - Use get_all_pools with sort_by and limit
   - "Show top 5 pools by APR" -> sort_by: "apr", limit: 5
   - "What are the highest fee pools" -> sort_by: "fees"
   - Default limit is 10 if not specified
2. Coins:
   - Use coin symbols from the list above instead of addresses
   - Unlisted coins must be given as full coin types (0x...::module::NAME)
3. Answer templates:
   - final_answer may reference tool results with ${{...}} expressions
   - ${{result}} is the output of the first action, ${{results[1]}} the output of the second
   - Walk into outputs with .field or [index], e.g. ${{result.current}} or ${{results[0].tvl}}
   - ${{results['SUI']}} selects a coin from a price mapping by symbol
   - Leave final_answer as "${{result}}" to use the built-in formatting
4. If the query lacks something a tool requires (a pool id, a wallet address), respond with status "needs_info" and ask for it in "request"
5. If the query cannot be answered with these tools, respond with status "error" and explain in "error_message"

Examples:
Query: What is the price of SUI?
{{"status": "success", "reasoning": "Price lookup for SUI", "actions": [{{"tool": "get_token_price", "input": {{"token_type": "SUI"}}}}], "final_answer": "SUI is trading at $${{result.current}}"}}

Query: How much liquidity is in the pool?
{{"status": "needs_info", "reasoning": "No pool id given", "actions": [], "request": "Which pool? Please provide the pool id (0x...)."}}

Query: Send 5 SUI to my friend
{{"status": "error", "reasoning": "Transfers are not supported", "actions": [], "error_message": "I can only look up market data, not send transactions."}}

Respond with JSON only:
{{
  "status": "success" | "needs_info" | "error",
  "reasoning": "brief explanation",
  "actions": [{{"tool": "name", "input": {{"param": "value"}}}}],
  "final_answer": "answer text or template",
  "request": "question for the user (needs_info only)",
  "error_message": "reason (error only)"
}}"""


def _describe_tool(definition: ToolDefinition) -> str:
    required = ", ".join(p.name for p in definition.required_parameters) or "none"
    lines = [
        f"    {definition.name}:",
        f"      Description: {definition.description}",
        f"      Required inputs: {required}",
    ]
    optional = [
        f"{p.name} (default: {p.default})" if p.has_default else p.name
        for p in definition.optional_parameters
    ]
    if optional:
        lines.append(f"      Optional inputs: {', '.join(optional)}")
    return "\n".join(lines)


def render_tool_catalog(registry: ToolRegistry) -> str:
    sections: List[str] = []
    for category, definitions in registry.by_category().items():
        body = "\n\n".join(_describe_tool(d) for d in definitions)
        sections.append(f"{category}:\n{body}")
    return "\n\n".join(sections)


def render_symbol_table(symbols: SymbolResolver) -> str:
    return "\n".join(f"- {symbol}: {coin_type}" for symbol, coin_type in symbols)


def build_prompt(query: str, registry: ToolRegistry, symbols: SymbolResolver) -> str:
    """Render the planning instruction for one query. The query is embedded verbatim."""
    return PLANNER_PROMPT.format(
        tools=render_tool_catalog(registry),
        coins=render_symbol_table(symbols),
        query=query,
    )
