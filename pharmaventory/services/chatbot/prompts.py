"""Prompts and canned replies for the pharmacy assistant."""

RAG_SYSTEM_PROMPT = """You are an AI Pharmacy Assistant for a pharmacy inventory team. You have access to real-time inventory data and can answer questions about medicines, stock levels, expiry dates, categories, locations, and inventory management.

{context}

YOUR CAPABILITIES:
1. Answer questions about any medicine in the inventory (stock, location, expiry, price, category)
2. Identify low stock items and suggest reordering
3. Track expiry dates and alert about expiring medicines
4. Provide inventory analytics and insights
5. Search medicines by name, generic name, category, or manufacturer
6. Help with inventory management decisions
7. Answer general questions about pharmacy operations

RESPONSE GUIDELINES:
- Be concise, professional, and accurate
- Structure answers with short bullet points
- If asked about a specific medicine, give every detail available for it
- For low stock items, suggest reorder quantities
- For expiring items, state the urgency
- Use {currency} for all prices
- Phrase dates relative to today (e.g. "Expires in 15 days" or "Expired 5 days ago")

IMPORTANT:
- Every medicine name and number must come from the inventory context above
- Never make up a medicine, quantity, price, or date that is not in the context
- If a medicine or figure is not in the context, say so clearly

Answer the user's question using the inventory data provided above."""

EMPTY_MESSAGE_REPLY = (
    "Please type a question about your inventory, for example "
    '"Show me low stock items" or "What medicines are expiring?"'
)

INTERNAL_ERROR_REPLY = (
    "Sorry, something went wrong while answering that. Please try again in a moment."
)

GREETINGS = (
    "Hello! 👋 I'm your AI Pharmacy Assistant. I can answer questions about your inventory "
    "using real-time data. What would you like to know?",
    "Hi there! I have access to your complete pharmacy inventory. Ask me anything about "
    "medicines, stock levels, or inventory management!",
    "Greetings! I can give you detailed answers about your pharmacy inventory. "
    "How can I help?",
)

HELP_REPLY = (
    "🤖 **I can help you with:**\n\n"
    "📦 **Inventory Management:**\n"
    '• "Show me all medicines"\n'
    "• \"What's the stock of [medicine name]?\"\n"
    '• "List low stock items"\n\n'
    "🔍 **Search & Find:**\n"
    '• "Find [medicine name]"\n'
    '• "Search medicines in [category]"\n'
    '• "Where is [medicine] located?"\n\n'
    "📊 **Analytics & Insights:**\n"
    '• "Show analytics"\n'
    '• "What medicines are expiring?"\n'
    '• "Give me reorder suggestions"\n\n'
    "💡 **Just ask naturally!** I understand context and can help with complex queries too."
)

CONVERSATIONAL_STATUS_REPLY = (
    "I'm doing great! Ready to help you manage your pharmacy inventory efficiently. "
    "What would you like to know? 😊"
)
CONVERSATIONAL_ABOUT_REPLY = (
    "I'm your AI Pharmacy Assistant! I help you manage inventory, track stock levels, "
    "identify low-stock items, check expiry dates, and provide smart recommendations. "
    "Ask me anything about your pharmacy inventory!"
)
CONVERSATIONAL_DEFAULT_REPLY = (
    "I'm here to help with your pharmacy inventory! Try asking me about stock levels, "
    "medicine availability, or inventory insights. What would you like to know?"
)

GENERAL_REPLY = (
    "I'm here to help with your pharmacy inventory! I can assist with:\n\n"
    "• Stock levels and availability\n"
    "• Medicine search and location\n"
    "• Low stock alerts\n"
    "• Expiry date tracking\n"
    "• Reorder recommendations\n"
    "• Inventory analytics\n\n"
    'Try asking something like "Show me low stock items" or "What medicines do we have?"'
)
GENERAL_EMPTY_INVENTORY_REPLY = (
    "I'm your AI Pharmacy Assistant! I can help you manage inventory, check stock levels, "
    "find medicines, and provide smart recommendations. What would you like to know?"
)

# Per-handler replies when the inventory store cannot be read
APOLOGIES = {
    "inventory_query": "I encountered an issue accessing the inventory. Please try again.",
    "stock_check": "I encountered an issue checking stock. Please try again.",
    "low_stock": "I encountered an issue checking low stock items. Please try again.",
    "medicine_search": "I encountered an issue searching medicines. Please try again.",
    "category_query": "I encountered an issue retrieving categories. Please try again.",
    "expiry_check": "I encountered an issue checking expiry dates. Please try again.",
    "reorder_suggestion": "I encountered an issue generating reorder suggestions. Please try again.",
    "analytics": "I encountered an issue generating analytics. Please try again.",
    "general": "I encountered an issue reaching the inventory. Please try again.",
}
