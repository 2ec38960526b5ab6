"""
LLM prompt templates for revenue statement extraction.

Contains:
- The system instruction for the vision model
- The extraction prompt with the output schema, the tax vs. deduction
  classification rules and a calibrated worked example
"""

# Worked example taken from a real statement; the model uses it to calibrate
# how taxes and deductions are separated
CALIBRATION_EXAMPLE = '''
CALIBRATION EXAMPLE:
Property: "Verde 13-2HZ NBRR" (complete well name exactly as shown)
Property Number: "138366-1"
Product Type: "GAS"

Financial breakdown for this property:
- Gross Value: 618.52 (total revenue before deductions)
- Taxes: -14.25 (ONLY severance, federal, state, withholding taxes)
- Deductions: -435.42 (gathering/compression -169.10 + processing -266.32)
- Net Payment: 168.85 (618.52 - 14.25 - 435.42 = 168.85)
'''


SYSTEM_PROMPT = (
    "You are a financial data extraction expert specializing in oil & gas "
    "revenue statements. Always respond with valid JSON only. Extract exact "
    "values from documents with precision. Distinguish carefully between "
    "taxes (severance, federal, state, withholding) and deductions (all other "
    "operational costs). Verify calculations match the net payments shown."
)


REVENUE_EXTRACTION_PROMPT = '''You are an expert financial data extraction specialist for oil & gas revenue statements.

Analyze the attached revenue statement pages and extract structured data with exact precision.
{example}
EXTRACTION RULES:

1. PROPERTY IDENTIFICATION:
   - Extract complete well names exactly as shown (e.g., "Verde 13-2HZ NBRR")
   - Include property numbers that appear next to well names (e.g., "138366-1")
   - Include the product type (GAS, OIL, NGL, WATER) in each description

2. FINANCIAL CATEGORIZATION:
   TAXES (the "taxes" field contains ONLY these):
   - Severance Tax
   - Federal Tax
   - State Tax
   - Federal Withholding
   - State Withholding
   - Income Tax Withholding
   - Any item explicitly labeled as "tax"

   DEDUCTIONS (never part of "taxes"; they are implied by netRevenue):
   - Gathering fees/costs
   - Compression fees/costs
   - Processing fees/costs
   - Transportation costs
   - Marketing fees
   - Administrative fees
   - Service charges
   - Pipeline fees
   - Any other operational costs or fees

3. CALCULATION CHECK:
   - Net Value = Gross Value - |Taxes| - |Deductions|
   - The statement totals should balance this way

4. VALUE EXTRACTION:
   - Use exact values from the document; do not round or estimate
   - Negative values for taxes and deductions
   - Positive values for gross revenue and net payments

Return ONLY a valid JSON object with this structure:
{{
  "company": "Company name",
  "period": "Time period (e.g., 'December 2021', 'Q4 2023')",
  "totalRevenue": number,
  "lineItems": [
    {{
      "description": "Complete property description with well name and product type",
      "quantity": number,
      "rate": number,
      "amount": number
    }}
  ],
  "taxes": number,
  "netRevenue": number
}}

INSTRUCTIONS:
1. Extract ALL revenue line items with their quantities, rates and amounts
2. Identify the company name and reporting period from the document headers
3. Analyze all pages to get complete information
4. Return ONLY the JSON object, no additional text or markdown formatting
'''


def get_extraction_prompt(include_example: bool = True) -> str:
    """
    Generate the revenue statement extraction prompt.

    Args:
        include_example: Whether to include the calibration example

    Returns:
        Formatted prompt string
    """
    example = CALIBRATION_EXAMPLE if include_example else ""
    return REVENUE_EXTRACTION_PROMPT.format(example=example)


def get_system_prompt() -> str:
    """Get the system instruction sent before the extraction prompt."""
    return SYSTEM_PROMPT
