# WhatsApp message templates for the feedback flow
MESSAGES = {
    "greeting": (
        "👋 Hi there! Thanks for taking a moment to share your feedback.\n\n"
        "Let's start with your name. What should we call you?"
    ),
    "need_text": "✍️ Please reply with a text message so we can continue.",
    "name_received": (
        "Nice to meet you, {name}! 😊\n\n"
        "💬 Please tell us about your experience. What feedback would you like to share?"
    ),
    "feedback_received": (
        "🙏 Thank you, your feedback has been received!\n\n"
        "📸 As a last step, please send us a photo for your profile."
    ),
    "need_image": "📸 Please send an image to complete your submission.",
    "completed": (
        "✅ All done, {name}! Your feedback and photo have been saved.\n\n"
        "Send 'Hi' any time to share more feedback."
    ),
    "system_error": (
        "❌ Sorry, something went wrong on our side. "
        "Please try again in a moment or send 'Hi' to start over."
    ),
}

# Positional arguments each template expects, in order
TEMPLATE_ARGS = {
    "name_received": ("name",),
    "completed": ("name",),
}


def get_template(key: str, *args: str) -> str:
    """Render the message template ``key`` with its positional arguments."""
    if key not in MESSAGES:
        raise KeyError(f"Unknown message template: {key}")

    names = TEMPLATE_ARGS.get(key, ())
    if len(args) != len(names):
        raise ValueError(
            f"Template '{key}' expects {len(names)} argument(s), got {len(args)}"
        )
    return MESSAGES[key].format(**dict(zip(names, args)))
