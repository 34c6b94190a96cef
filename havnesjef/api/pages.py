from __future__ import annotations

from html import escape

INDEX_PAGE = """<!DOCTYPE html>
<html>
<head>
    <title>Ut på bølgene blå</title>
</head>
<body>
    <h1>Lagnavn</h1>
    <form method="POST" action="/">
        <input type="text" name="team" placeholder="Lagnavn" required>
        <button type="submit">Submit</button>
    </form>
</body>
</html>
"""

_KUBECONFIG_PAGE = """<!DOCTYPE html>
<html>
<head>
    <title>Kubeconfig for {team}</title>
    <style>
        code, pre {{
            border-radius: .5rem;
            overflow-x: auto;
            background-color: #24292e;
            color: #e1e4e8;
        }}
        code {{ padding: .25rem; }}
        pre {{ padding: 1rem; }}
    </style>
</head>
<body>
    <h1>Kubeconfig for ✨{team}✨</h1>
    <p>
        <ol>
            <li>Opprett en fil som heter <code>config</code></li>
            <li>Lim innholdet nedenfor inn i filen</li>
            <li>Kjør <code>export KUBECONFIG=./config</code> i din terminal</li>
        </ol>

        PS: Hvis du lukker terminalen din må du kjøre <code>export KUBECONFIG=./config</code> på nytt.
    </p>
    <button onclick="copyToClipboard()">Copy Kubeconfig</button>
    <pre id="kubeconfig">{kubeconfig}</pre>
    <a href="/">Back</a>
    <script>
      function copyToClipboard() {{
        const pre = document.getElementById('kubeconfig');
        navigator.clipboard.writeText(pre.innerText);
      }}
    </script>
</body>
</html>
"""

_ERROR_PAGE = """<!DOCTYPE html>
<html>
<head>
    <title>Error!</title>
</head>
<body>
    <h1>Skipet ditt sank</h1>
    <p>Kunne ikke opprette laget <strong>{team}</strong>.</p>
    <p id="error">{error}</p>
    <a href="/">Back</a>
</body>
</html>
"""


def kubeconfig_page(*, team: str, kubeconfig: str) -> str:
    return _KUBECONFIG_PAGE.format(team=escape(team), kubeconfig=escape(kubeconfig))


def error_page(*, team: str, error: str) -> str:
    return _ERROR_PAGE.format(team=escape(team), error=escape(error))
