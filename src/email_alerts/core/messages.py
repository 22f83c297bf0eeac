"""User-facing messages for subscription management outcomes."""

from email_alerts.core.models import Frequency

FREQUENCY_LABELS: dict[Frequency, str] = {
    Frequency.IMMEDIATELY: "Every time there are changes",
    Frequency.DAILY: "Once a day",
    Frequency.WEEKLY: "Once a week",
}

FREQUENCY_CHANGED = "You’ll now get updates about {subscription_title} {frequency}"
ADDRESS_CHANGED = "Your email address has been changed to {address}"
MISSING_ADDRESS = "Enter your email address"
INVALID_ADDRESS = (
    "This doesn’t look like a valid email address – "
    "check you’ve entered it correctly"
)
INVALID_FREQUENCY = "Choose how often you want to get updates"
SUBSCRIPTION_NOT_FOUND = "Subscription not found"
UNSUBSCRIBED_ALL = "You have been unsubscribed from all your subscriptions"
UNSUBSCRIBED_ALL_DESCRIPTION = (
    "It can take up to an hour for this change to take effect."
)
CONFIRM_UNSUBSCRIBE_ALL = (
    "You will not get any more emails about any of your subscriptions."
)
NO_SUBSCRIPTIONS = "You aren’t subscribed to any topics."


def frequency_text(frequency: str) -> str:
    """Return the phrase used for a frequency inside a sentence.

    ``immediately`` reads badly mid-sentence, so it is replaced with its
    lower-cased label; other frequencies are used as-is.
    """
    if frequency == Frequency.IMMEDIATELY:
        return FREQUENCY_LABELS[Frequency.IMMEDIATELY].lower()
    return frequency
