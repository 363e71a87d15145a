"""Prompt templates for the creative engine."""

SAFE_ZONE_PROMPT = """Analyze this product image. Identify the PRIMARY flat surface area \
suitable for engraving or printing a logo. Return exactly one bounding box for this \
'safe zone' in normalized coordinates where 0-1000 represents the full image.

Respond with JSON only, in this exact format:
```json
{"ymin": 0, "xmin": 0, "ymax": 1000, "xmax": 1000}
```"""

CREATIVE_PROMPT = """You are the "Souvy Creative Engine," a sophisticated AI for a premium gifting platform.

TASK 1: Generate a 2-3 sentence heartfelt or professional note.
- Gift: {product_name}
- Occasion: {occasion}
- Recipient: {recipient_name}
- Tone: {tone}
- Constraint: Reference the specific item or the "vibe" of gifting. Sophisticated, no cliches.

TASK 2: Provide "vibe-consistent" design advice for branding.
- User Intent: {logo_description}
- Product: {product_name}
- Output: Practical, aesthetic-driven advice for engraving or positioning.

TASK 3: Logistic Logic.
- Create a summary of the final design specs for the production team.

Respond with JSON only, in this exact format:
```json
{{"note": "...", "designAdvice": "...", "finalSpecs": "..."}}
```"""

RECEIPT_PROMPT = """Analyze this bank transfer receipt.
Verify if the following details match the receipt:
1. Amount: {amount} (check if it matches the total amount on the receipt).
2. Transaction Reference/Remark: "{reference}" (look for this exact string in the notes, remarks, or reference section).
3. Recipient Account Name: "{account_name}".

Respond with JSON only, in this exact format:
```json
{{"verified": true, "reason": "what matched or what didn't, concisely"}}
```
verified must be true only if ALL three match reasonably well."""
