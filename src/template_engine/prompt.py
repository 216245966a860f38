"""Prompts sent to the chat-model collaborators."""

STRUCTURE_ANALYSIS_PROMPT = """\
You are analyzing the structure of a document template.

Below is a JSON outline of the document: paragraphs (with their text), tables,
rows and cells. Find every placeholder in the text, i.e. a literal marker that
stands for a value to be filled in later, such as "[CLIENT_NAME]" or
"[POLICY_TYPE]".

For each placeholder return a canonical variable name in PascalCase
(for example "[CLIENT_NAME]" -> "ClientName"). Use the placeholder text EXACTLY
as it appears in the document, brackets included. Two different placeholders
that mean the same thing may share a variable name.

Document outline:
{schema_json}

Return ONLY a JSON object mapping placeholder text to variable name, for example:
{{
  "[CLIENT_NAME]": "ClientName",
  "[POLICY_TYPE]": "PolicyType"
}}
Return only valid JSON, no additional text.
"""

FREE_TEXT_PROMPT = """\
A document template contains a highlighted passage that describes the content
an author wants in its place. Write that content.

Highlighted passage:
{original_text}

Return only the replacement text, as plain prose without Markdown, quotes or
explanations. Match the tone of a professional business document.
"""

TABLE_VALUES_PROMPT = """\
You are filling in cells of a table in a business document.

The table is shown below in Markdown. Cells you must fill are marked with a
token such as {{{{AI_GEN_CONTENT_0}}}}; use the row and column headers around
each token to decide what value belongs there.

{markdown}

Cells to fill: {tags}

Return ONLY a JSON object with the exact names above (without braces) as keys
and the cell values as strings, for example:
{{
  "AI_GEN_CONTENT_0": "1,250"
}}
Return only valid JSON, no additional text.
"""

DOCUMENT_VALUES_PROMPT = """\
You are analyzing a document template. The document has the following
placeholders that need values:
{tags}

Document content:
{document_text}

Generate appropriate contextual values for each placeholder based on the
document content. Return ONLY a JSON object with the exact placeholder names as
keys and your generated values as values, for example:
{{
  "ClientName": "Acme Corporation",
  "PolicyType": "General Liability"
}}

IMPORTANT: Use the EXACT placeholder names I provided: {tags}
Return only valid JSON, no additional text.
"""
