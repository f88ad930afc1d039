#!/usr/bin/env python3
"""MCP Server for Financial Projections.

This server exposes the tax and projection calculations as MCP tools,
allowing AI assistants to answer questions about a client's finances.
"""

import os
import sys
import json
import asyncio
import logging
from typing import Any

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import Tool, TextContent

from tools import MultiProgramTools

logger = logging.getLogger(__name__)

# Create the MCP server
server = Server("financial-projections")

# Global tools instance (initialized on startup)
tools: MultiProgramTools | None = None


def get_tools() -> MultiProgramTools:
    """Get or initialize the tools instance."""
    global tools
    if tools is None:
        # Default program can be set via FINANCIAL_PROJECTIONS_PROGRAM env var
        default_program = os.environ.get('FINANCIAL_PROJECTIONS_PROGRAM')
        base_path = os.path.join(os.path.dirname(__file__), '..')
        tools = MultiProgramTools(base_path, default_program)
    return tools


# Common program parameter schema
PROGRAM_PARAM = {
    "type": "string",
    "description": "The program name (folder in input-parameters). If not specified, uses the default program. Use list_programs to see available programs."
}

TAX_YEAR_PARAM = {
    "type": "string",
    "description": "Optional: tax year of the rule table, e.g. '2024-25'. Defaults to the program's tax year. Use list_tax_years to see available years."
}


@server.list_tools()
async def list_tools() -> list[Tool]:
    """List available financial projection tools."""
    return [
        Tool(
            name="list_programs",
            description="List all available client programs with the client's age, income and tax year.",
            inputSchema={
                "type": "object",
                "properties": {},
                "required": []
            }
        ),
        Tool(
            name="reload_programs",
            description="Reload all client programs and tax rule tables from disk. Use this after adding, modifying, or removing spec.json files to refresh the cache without restarting the server.",
            inputSchema={
                "type": "object",
                "properties": {},
                "required": []
            }
        ),
        Tool(
            name="list_tax_years",
            description="List the tax years that have a tax rule table, and the latest one.",
            inputSchema={
                "type": "object",
                "properties": {},
                "required": []
            }
        ),
        Tool(
            name="get_tax_summary",
            description="Get the tax breakdown for the client's income: taxable income, income tax, Medicare levy, study debt repayment, total tax, after-tax income, marginal and average rates.",
            inputSchema={
                "type": "object",
                "properties": {
                    "tax_year": TAX_YEAR_PARAM,
                    "program": PROGRAM_PARAM
                },
                "required": []
            }
        ),
        Tool(
            name="compare_tax_optimization",
            description="Compare the client's current tax with the tax after applying optimization strategies (extra deductions, negative gearing, salary sacrifice to super). Also returns suggested strategies ranked by estimated saving.",
            inputSchema={
                "type": "object",
                "properties": {
                    "tax_year": TAX_YEAR_PARAM,
                    "additional_deductions": {
                        "type": "number",
                        "description": "Optional: extra deductions to claim, replacing the program's value"
                    },
                    "negative_gearing_opportunity": {
                        "type": "number",
                        "description": "Optional: extra negative gearing loss, replacing the program's value"
                    },
                    "super_contributions": {
                        "type": "number",
                        "description": "Optional: salary sacrificed into super, replacing the program's value"
                    },
                    "program": PROGRAM_PARAM
                },
                "required": []
            }
        ),
        Tool(
            name="get_retirement_projection",
            description="Get the year-by-year retirement savings projection (contributions, returns, balance and value in today's dollars), or the row for a single age.",
            inputSchema={
                "type": "object",
                "properties": {
                    "age": {
                        "type": "integer",
                        "description": "Optional: age to get the projection for. If omitted, returns all years."
                    },
                    "program": PROGRAM_PARAM
                },
                "required": []
            }
        ),
        Tool(
            name="get_net_worth_projection",
            description="Get the client's current net worth and the projection to retirement: asset values by class, remaining debts, retirement lump sum, passive income and the gap to the retirement income target.",
            inputSchema={
                "type": "object",
                "properties": {
                    "by_year": {
                        "type": "boolean",
                        "description": "Optional: also return net worth for every year until retirement"
                    },
                    "program": PROGRAM_PARAM
                },
                "required": []
            }
        ),
        Tool(
            name="get_amortization_schedule",
            description="Get the monthly repayment schedule for the program's loan with totals paid and interest.",
            inputSchema={
                "type": "object",
                "properties": {
                    "summary_only": {
                        "type": "boolean",
                        "description": "Optional: return totals only, without the payment-by-payment schedule"
                    },
                    "program": PROGRAM_PARAM
                },
                "required": []
            }
        ),
        Tool(
            name="assess_serviceability",
            description="Assess whether the client can service a loan: monthly surplus after living costs, tax and existing repayments, the serviceability ratio, remaining buffer and a stress test at a rate 3 points higher. Uses the program's loan unless overridden.",
            inputSchema={
                "type": "object",
                "properties": {
                    "tax_year": TAX_YEAR_PARAM,
                    "principal": {
                        "type": "number",
                        "description": "Optional: amount to borrow, replacing the program's loan principal"
                    },
                    "annual_rate": {
                        "type": "number",
                        "description": "Optional: annual interest rate as a decimal, replacing the program's loan rate"
                    },
                    "term_years": {
                        "type": "number",
                        "description": "Optional: loan term in years, replacing the program's loan term"
                    },
                    "program": PROGRAM_PARAM
                },
                "required": []
            }
        ),
        Tool(
            name="calculate_loan",
            description="Calculate the monthly repayment, total paid and total interest for any fixed-rate loan.",
            inputSchema={
                "type": "object",
                "properties": {
                    "principal": {
                        "type": "number",
                        "description": "Amount borrowed"
                    },
                    "annual_rate": {
                        "type": "number",
                        "description": "Annual interest rate as a decimal, e.g. 0.06 for 6%"
                    },
                    "years": {
                        "type": "integer",
                        "description": "Loan term in years (1-50)"
                    }
                },
                "required": ["principal", "annual_rate", "years"]
            }
        )
    ]


OVERRIDE_KEYS = ("additional_deductions", "negative_gearing_opportunity", "super_contributions")
LOAN_OVERRIDE_KEYS = ("principal", "annual_rate", "term_years")


@server.call_tool()
async def call_tool(name: str, arguments: dict[str, Any]) -> list[TextContent]:
    """Handle tool calls."""
    try:
        fp_tools = get_tools()
        program = arguments.get("program")

        if name == "list_programs":
            result = fp_tools.list_programs()
        elif name == "reload_programs":
            result = fp_tools.reload_programs()
        elif name == "list_tax_years":
            result = fp_tools.list_tax_years()
        elif name == "get_tax_summary":
            result = fp_tools.get_tax_summary(arguments.get("tax_year"), program)
        elif name == "compare_tax_optimization":
            overrides = {k: arguments[k] for k in OVERRIDE_KEYS if arguments.get(k) is not None}
            result = fp_tools.compare_tax_optimization(arguments.get("tax_year"), overrides, program)
        elif name == "get_retirement_projection":
            result = fp_tools.get_retirement_projection(arguments.get("age"), program)
        elif name == "get_net_worth_projection":
            result = fp_tools.get_net_worth_projection(bool(arguments.get("by_year", False)), program)
        elif name == "get_amortization_schedule":
            result = fp_tools.get_amortization_schedule(bool(arguments.get("summary_only", False)), program)
        elif name == "assess_serviceability":
            loan_overrides = {k: arguments[k] for k in LOAN_OVERRIDE_KEYS if arguments.get(k) is not None}
            result = fp_tools.assess_serviceability(arguments.get("tax_year"), loan_overrides, program)
        elif name == "calculate_loan":
            result = fp_tools.calculate_loan(
                arguments["principal"],
                arguments["annual_rate"],
                arguments["years"]
            )
        else:
            result = {"error": f"Unknown tool: {name}"}

        return [TextContent(
            type="text",
            text=json.dumps(result, indent=2, default=str)
        )]
    except Exception as e:
        logger.warning("Tool %s failed: %s", name, e)
        return [TextContent(
            type="text",
            text=json.dumps({"error": str(e)}, indent=2)
        )]


async def main():
    """Run the MCP server."""
    # Logs go to stderr so stdout stays free for the stdio transport
    logging.basicConfig(level=logging.WARNING, stream=sys.stderr)
    async with stdio_server() as (read_stream, write_stream):
        await server.run(read_stream, write_stream, server.create_initialization_options())


if __name__ == "__main__":
    asyncio.run(main())
