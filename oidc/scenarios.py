"""Canned user scenarios offered by the scenario picker.

The chosen name is passed to /authorize unchanged and becomes the userId
of the nonce binding.
"""

from oidc.models import DEFAULT_SCENARIO

SCENARIOS: dict[str, str] = {
    DEFAULT_SCENARIO: "Signed-in user with no special state",
    "happy-path": "Verified user completing the journey",
    "unverified-email": "User whose email address is not yet verified",
    "no-phone-number": "User without a registered phone number",
    "mfa-required": "User who must complete a second factor",
    "suspended-account": "User whose account is temporarily suspended",
}
