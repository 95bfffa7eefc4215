"""
Expense Tracker With AI Voice - Source Package

Record expenses by typing or speaking a free-text description; Gemini turns
it into a structured expense that is added to the session's expense list.

DESIGN PRINCIPLES:
1. The LLM only translates text into fields; it is never trusted blindly
2. Every record is fully populated, whatever the model returns
3. Failures are classified and shown to the user; the app never crashes
4. Every step is auditable
5. The expense list lives in session memory only
"""

__version__ = "1.0.0"
__author__ = "Expense Tracker Team"
