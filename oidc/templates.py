"""HTML templates for the scenario picker.

Templates are str.format() strings; literal CSS braces are doubled.
Values are HTML-escaped by render_scenario_page() before formatting.
"""

from html import escape

from oidc.scenarios import SCENARIOS

SCENARIO_PAGE = """
<!DOCTYPE html>
<html>
<head>
    <title>Choose a scenario - OIDC Stub</title>
    <style>
        body {{ font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', sans-serif;
               background: #FAF9F7;
               min-height: 100vh; display: flex; align-items: center; justify-content: center; margin: 0; }}
        .container {{ background: white; padding: 40px; border-radius: 16px; box-shadow: 0 4px 24px rgba(0,0,0,0.08);
                     width: 100%; max-width: 450px; border: 1px solid #E5E4E0; }}
        h1 {{ margin: 0 0 8px; color: #1A1915; font-size: 24px; font-weight: 600; }}
        p {{ color: #6B6860; margin: 0 0 24px; }}
        .info {{ background: #F5F5F0; color: #6B6860; padding: 12px; border-radius: 8px; margin-bottom: 20px; font-size: 14px; }}
        button {{ width: 100%; padding: 14px; margin-bottom: 10px; background: #D97756; text-align: left;
                 color: white; border: none; border-radius: 8px; font-size: 15px; font-weight: 600;
                 cursor: pointer; transition: all 0.2s; }}
        button:hover {{ background: #C4684A; }}
        .description {{ display: block; font-weight: 400; font-size: 13px; opacity: 0.85; }}
    </style>
</head>
<body>
    <div class="container">
        <h1>Choose a scenario</h1>
        <p>This is a stub identity provider. No real sign in takes place.</p>
        <div class="info">The selected scenario is issued as the user of the authorization code.</div>
        <form method="POST" action="/authorize">
            <input type="hidden" name="state" value="{state}">
            <input type="hidden" name="nonce" value="{nonce}">
            <input type="hidden" name="redirect_uri" value="{redirect_uri}">
            {buttons}
        </form>
    </div>
</body>
</html>
"""

SCENARIO_BUTTON = """<button type="submit" name="scenario" value="{name}">{name}<span class="description">{description}</span></button>"""


def render_scenario_page(state: str = "", nonce: str = "", redirect_uri: str = "", scenarios: dict = None) -> str:
    scenarios = scenarios if scenarios is not None else SCENARIOS
    buttons = "\n            ".join(
        SCENARIO_BUTTON.format(name=escape(name), description=escape(description))
        for name, description in scenarios.items()
    )
    return SCENARIO_PAGE.format(
        state=escape(state or ""),
        nonce=escape(nonce or ""),
        redirect_uri=escape(redirect_uri or ""),
        buttons=buttons,
    )
