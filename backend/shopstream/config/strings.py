# /shopstream/config/strings.py

# This file contains the user-facing strings of the storefront host, kept in one
# place so the wording can change without touching application logic.

HOST_WELCOME = "Welcome to the drop! Ask me anything."

# Answer heuristic
BEST_UNDER_BUDGET = "Best under budget: {title} (${price}). Features: {features}."
NOTHING_UNDER_BUDGET = "I couldn't find an item under that budget in stock."

# Server-side host answer
HOST_PICK = (
    'Based on your query "{prompt}", I recommend the {title} for ${price}. '
    "It has a {rating} star rating and features: {features}. "
    "Available in {colors} with {inventory} units in stock."
)
HOST_NO_PICK = (
    "I couldn't find products matching \"{prompt}\" in your budget. "
    "Let me show you our best alternatives!"
)
DEFAULT_FEATURES = "Great quality"
DEFAULT_COLORS = "multiple colors"

# Ask Host
NO_ANSWER_RETURNED = "(No answer returned)"
HOST_ERROR_PREFIX = "AI Host error (fallback): "

# Outfit recommendations
OUTFIT_PARSE_FAILURE = "Unable to parse AI recommendations"
OUTFIT_DEFAULT_OCCASION = "general"
OUTFIT_RETRY_TIP = "Try different search terms for better recommendations"

# Catalog
PLACEHOLDER_IMAGE_URL = "https://placehold.co/480x600?text=No+Image"
