"""Inline HTML views for the authorization endpoint.

Two forms ("sign in", "sign up") share a page shell and receive
{action, email, password, error, title}. Every interpolated value is
HTML-escaped; the forms post back to the exact URL they were served from
so the authorization parameters survive the round trip.
"""

from __future__ import annotations

import html

_PAGE_HTML = """\
<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="utf-8">
  <meta name="viewport" content="width=device-width, initial-scale=1">
  <title>{title}</title>
  <style>
    * {{ margin: 0; padding: 0; box-sizing: border-box; }}
    body {{
      font-family: system-ui, -apple-system, sans-serif;
      display: flex; justify-content: center; align-items: center;
      min-height: 100vh; background: #f5f5f5;
    }}
    .card {{
      background: #fff; padding: 2rem; border-radius: 8px;
      box-shadow: 0 2px 8px rgba(0,0,0,.1); width: 320px;
    }}
    h1 {{ font-size: 1.25rem; margin-bottom: 1.5rem; text-align: center; }}
    label {{ display: block; font-size: .85rem; margin-bottom: .25rem; }}
    input[type=email], input[type=password] {{
      width: 100%; padding: .5rem; margin-bottom: 1rem;
      border: 1px solid #ccc; border-radius: 4px; font-size: .95rem;
    }}
    button {{
      width: 100%; padding: .6rem; background: #111; color: #fff;
      border: none; border-radius: 4px; font-size: .95rem; cursor: pointer;
    }}
    .error {{ color: #c00; font-size: .85rem; margin-bottom: 1rem; }}
  </style>
</head>
<body>
  <div class="card">
    <h1>{title}</h1>
    {body}
  </div>
</body>
</html>
"""

_SIGN_IN_FORM = """\
{error}
    <form method="post" action="{action}">
      <label for="email">Email</label>
      <input id="email" name="email" type="email" value="{email}" required autofocus>
      <label for="password">Password</label>
      <input id="password" name="password" type="password" value="{password}">
      <button type="submit">Sign in</button>
    </form>"""

_SIGN_UP_FORM = """\
{error}
    <form method="post" action="{action}">
      <label for="email">Email</label>
      <input id="email" name="email" type="email" value="{email}" required autofocus>
      <label for="password">Password</label>
      <input id="password" name="password" type="password" value="{password}">
      <label for="confirm_password">Confirm password</label>
      <input id="confirm_password" name="confirm_password" type="password">
      <button type="submit">Sign up</button>
    </form>"""

SIGN_IN_TITLE = "Sign in"
SIGN_UP_TITLE = "Sign up"


def _escape(value: str | None) -> str:
    return html.escape(value or "", quote=True)


def render_form(
    *,
    sign_up: bool,
    action: str,
    email: str | None = None,
    password: str | None = None,
    error: str | None = None,
) -> str:
    """Render the sign-up form when ``sign_up`` is set, else sign-in."""
    title = SIGN_UP_TITLE if sign_up else SIGN_IN_TITLE
    template = _SIGN_UP_FORM if sign_up else _SIGN_IN_FORM
    error_block = f'<p class="error">{_escape(error)}</p>' if error else ""
    body = template.format(
        action=_escape(action),
        email=_escape(email),
        password=_escape(password),
        error=error_block,
    )
    return _PAGE_HTML.format(title=title, body=body)


def render_error(message: str) -> str:
    body = f'<p class="error">{_escape(message)}</p>'
    return _PAGE_HTML.format(title="Error", body=body)
