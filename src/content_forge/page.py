"""Single-page upload UI (inline CSS + vanilla JS, no external assets).

The script mirrors ``content_forge.session``: the same states, stage labels
and messages, with the stage ticker and the status poll as two timers that
are cleared on every terminal transition.
"""

from __future__ import annotations

import json

from content_forge.config import Settings
from content_forge.session import (
    MSG_INVALID_DROPPED,
    MSG_INVALID_RESPONSE,
    MSG_INVALID_SELECTED,
    MSG_NO_FILE,
    MSG_POLL_TIMEOUT,
    MSG_PROCESSING_FAILED,
    MSG_STILL_PROCESSING,
    POLLING_STAGE,
    STAGES,
    STILL_PROCESSING_STAGE,
)


def render_index(settings: Settings) -> str:
    """Render the upload page with the poll and stage timings baked in."""
    client_config = json.dumps(
        {
            "uploadUrl": "/api/upload-document",
            "statusUrl": "/api/check-status",
            "pollIntervalMs": int(settings.poll_interval_seconds * 1000),
            "pollMaxAttempts": settings.poll_max_attempts,
            "stageIntervalMs": int(settings.stage_interval_seconds * 1000),
            "stages": STAGES,
            "pollingStage": POLLING_STAGE,
            "stillProcessingStage": STILL_PROCESSING_STAGE,
            "messages": {
                "invalidSelected": MSG_INVALID_SELECTED,
                "invalidDropped": MSG_INVALID_DROPPED,
                "noFile": MSG_NO_FILE,
                "stillProcessing": MSG_STILL_PROCESSING,
                "invalidResponse": MSG_INVALID_RESPONSE,
                "processingFailed": MSG_PROCESSING_FAILED,
                "pollTimeout": MSG_POLL_TIMEOUT,
            },
        }
    )
    # "</" must not appear inside the inline script block.
    client_config = client_config.replace("</", "<\\/")

    return f"""<!doctype html>
<html lang="en">
<head>
  <meta charset="utf-8" />
  <meta name="viewport" content="width=device-width,initial-scale=1" />
  <title>ContentForgeAI - AI-Powered Content Generation</title>
  <meta name="description" content="Transform content briefs into premium, SEO-optimized articles" />
  <style>
    :root {{
      --bg: #0b0f19;
      --card: rgba(17, 24, 39, 0.6);
      --fg: #ffffff;
      --accent: #3b82f6;
      --accent-soft: rgba(59, 130, 246, 0.15);
      --border: rgba(59, 130, 246, 0.25);
      --muted: rgba(191, 219, 254, 0.75);
      --ok: #4ade80;
      --bad: #fca5a5;
    }}
    body {{
      margin: 0;
      min-height: 100vh;
      font-family: system-ui, -apple-system, Segoe UI, Roboto, Arial, sans-serif;
      background: radial-gradient(circle at center, #1e3a8a55 0, var(--bg) 60%);
      color: var(--fg);
      line-height: 1.4;
    }}
    header {{
      max-width: 1100px;
      margin: 0 auto;
      padding: 24px 18px;
      font-size: 22px;
      font-weight: 700;
      color: #93c5fd;
    }}
    main {{
      max-width: 720px;
      margin: 40px auto;
      padding: 0 16px 40px 16px;
      text-align: center;
    }}
    h1 {{
      font-size: 48px;
      margin: 0 0 12px 0;
      color: #93c5fd;
    }}
    .lead {{
      color: var(--muted);
      font-size: 18px;
      margin-bottom: 40px;
    }}
    .card {{
      border: 1px solid var(--border);
      background: var(--card);
      border-radius: 16px;
      padding: 32px;
    }}
    .hidden {{ display: none; }}
    .drop {{
      border: 2px dashed var(--border);
      border-radius: 12px;
      padding: 48px 16px;
      cursor: pointer;
    }}
    .drop.dragging {{
      border-color: #60a5fa;
      background: var(--accent-soft);
    }}
    .small {{
      font-size: 13px;
      color: var(--muted);
    }}
    .btn {{
      margin-top: 24px;
      background: var(--accent);
      color: white;
      border: none;
      border-radius: 999px;
      padding: 12px 32px;
      font-size: 16px;
      font-weight: 700;
      cursor: pointer;
    }}
    .btn:disabled {{
      opacity: 0.5;
      cursor: not-allowed;
    }}
    .btn.secondary {{
      background: var(--accent-soft);
      border: 1px solid var(--border);
      color: #bfdbfe;
    }}
    .error {{
      margin-bottom: 16px;
      padding: 12px;
      border-radius: 8px;
      border: 1px solid rgba(239, 68, 68, 0.3);
      background: rgba(239, 68, 68, 0.1);
      color: var(--bad);
      font-size: 14px;
    }}
    .spinner {{
      width: 64px;
      height: 64px;
      margin: 0 auto 16px auto;
      border: 4px solid var(--accent-soft);
      border-top-color: var(--accent);
      border-radius: 50%;
      animation: spin 1s linear infinite;
    }}
    @keyframes spin {{ to {{ transform: rotate(360deg); }} }}
    .stage {{
      color: #93c5fd;
      font-size: 18px;
      font-weight: 600;
    }}
    .ok {{ color: var(--ok); font-size: 48px; }}
    a.result {{
      display: inline-block;
      margin-top: 12px;
      padding: 12px 24px;
      border-radius: 8px;
      background: var(--accent);
      color: white;
      text-decoration: none;
      font-weight: 600;
    }}
    footer {{
      text-align: center;
      color: var(--muted);
      font-size: 13px;
      padding: 24px;
    }}
  </style>
</head>
<body>
  <header>ContentForgeAI</header>

  <main>
    <h1>ContentForgeAI</h1>
    <div class="lead">Transform your content briefs into SEO-optimized, YMYL-compliant, publication-ready articles in minutes</div>

    <section id="formView" class="card">
      <div id="formError" class="error hidden"></div>
      <div id="dropZone" class="drop">
        <input id="fileInput" type="file" accept=".pdf" class="hidden" />
        <div id="dropEmpty">
          <div><b>Drop your PDF here or click to browse</b></div>
          <div class="small">Supports PDF files only</div>
        </div>
        <div id="dropFile" class="hidden">
          <div><b id="fileName"></b></div>
          <div class="small" id="fileSize"></div>
        </div>
      </div>
      <button id="submitBtn" class="btn" type="button" disabled>Generate SEO Content</button>
    </section>

    <section id="progressView" class="card hidden">
      <div class="spinner"></div>
      <h3>Processing Your Content Brief</h3>
      <div id="stage" class="stage"></div>
      <p class="small">This may take 1-2 minutes for complex documents...</p>
      <div id="progressError" class="error hidden"></div>
    </section>

    <section id="resultView" class="card hidden">
      <div class="ok">&#10003;</div>
      <h3>Content Generated Successfully!</h3>
      <div class="small">Your SEO-optimized article is ready</div>
      <div class="small" id="resultFile"></div>
      <a id="resultLink" class="result" target="_blank" rel="noopener noreferrer">View in Google Drive</a>
      <div><button id="resetBtn" class="btn secondary" type="button">Submit Another Brief</button></div>
    </section>
  </main>

  <footer>&copy; ContentForgeAI. Powered by Advanced AI &amp; SEO Research</footer>

<script>
(function() {{
  const CONFIG = {client_config};
  const MSG = CONFIG.messages;

  const state = {{
    file: null,
    status: "idle",
    error: "",
    stage: "",
    resultLink: "",
    jobId: "",
    pollingAttempts: 0
  }};
  let stageTimer = null;
  let pollTimer = null;

  const el = (id) => document.getElementById(id);

  function clearTimers() {{
    if (stageTimer !== null) {{ clearInterval(stageTimer); stageTimer = null; }}
    if (pollTimer !== null) {{ clearInterval(pollTimer); pollTimer = null; }}
  }}

  function showError(node, text) {{
    node.textContent = text;
    node.classList.toggle("hidden", !text);
  }}

  function render() {{
    const busy = state.status === "submitting" || state.status === "polling";
    el("formView").classList.toggle("hidden", busy || state.status === "completed");
    el("progressView").classList.toggle("hidden", !busy);
    el("resultView").classList.toggle("hidden", state.status !== "completed");

    showError(el("formError"), busy ? "" : state.error);
    showError(el("progressError"), busy ? state.error : "");

    el("dropEmpty").classList.toggle("hidden", !!state.file);
    el("dropFile").classList.toggle("hidden", !state.file);
    if (state.file) {{
      el("fileName").textContent = state.file.name;
      el("fileSize").textContent = "Ready to submit (" + (state.file.size / 1024).toFixed(2) + " KB)";
    }}
    el("submitBtn").disabled = !state.file;
    el("stage").textContent = state.stage;

    if (state.status === "completed") {{
      el("resultFile").textContent = state.file ? state.file.name : "";
      el("resultLink").href = state.resultLink;
      el("resultLink").classList.toggle("hidden", !state.resultLink);
    }}
  }}

  function selectFile(file, dropped) {{
    if (file && file.type === "application/pdf") {{
      state.file = file;
      state.error = "";
    }} else {{
      state.error = dropped ? MSG.invalidDropped : MSG.invalidSelected;
    }}
    render();
  }}

  function complete(link) {{
    clearTimers();
    state.resultLink = link;
    state.status = "completed";
    state.stage = "";
    state.error = "";
    render();
  }}

  function fail(message) {{
    clearTimers();
    state.error = message;
    state.status = "failed";
    state.stage = "";
    render();
  }}

  function countAttempt() {{
    // Counter is read in the same tick it is written.
    state.pollingAttempts += 1;
    if (state.pollingAttempts >= CONFIG.pollMaxAttempts) {{
      fail(MSG.pollTimeout);
    }}
  }}

  async function pollOnce() {{
    if (state.status !== "polling") return;
    try {{
      const r = await fetch(CONFIG.statusUrl + "?jobId=" + encodeURIComponent(state.jobId));
      const result = await r.json();
      if (state.status !== "polling") return;
      if (result.status === "completed" && result.data && result.data.webViewLink) {{
        complete(result.data.webViewLink);
      }} else if (result.status === "failed") {{
        fail(MSG.processingFailed);
      }} else {{
        countAttempt();
      }}
    }} catch (e) {{
      console.error("Polling error:", e);
      if (state.status === "polling") countAttempt();
    }}
  }}

  function startPolling(jobId) {{
    state.jobId = jobId;
    state.pollingAttempts = 0;
    state.status = "polling";
    state.stage = CONFIG.pollingStage;
    render();
    pollTimer = setInterval(pollOnce, CONFIG.pollIntervalMs);
  }}

  function findJobId(result) {{
    if (result.data && result.data.jobId) return String(result.data.jobId);
    if (result.jobId) return String(result.jobId);
    return null;
  }}

  function submitError(message) {{
    if (message.includes("524") || message.includes("timeout")) {{
      // The poll timer is not running yet; only the stage ticker is live.
      if (stageTimer !== null) {{ clearInterval(stageTimer); stageTimer = null; }}
      state.error = MSG.stillProcessing;
      state.stage = CONFIG.stillProcessingStage;
    }} else {{
      clearTimers();
      state.error = "Failed to submit: " + message + ". Please try again.";
      state.status = "idle";
      state.stage = "";
    }}
    render();
  }}

  async function readError(r) {{
    const text = await r.text();
    let detail = text;
    try {{
      const body = JSON.parse(text);
      if (body && body.error) detail = body.error;
    }} catch (e) {{
      // Gateway error pages are HTML, keep the raw text.
    }}
    return "HTTP " + r.status + ": " + (detail || "Failed to submit");
  }}

  async function submit() {{
    if (!state.file) {{
      state.error = MSG.noFile;
      render();
      return;
    }}
    state.status = "submitting";
    state.error = "";
    state.stage = CONFIG.stages[0];
    render();

    stageTimer = setInterval(() => {{
      const i = CONFIG.stages.indexOf(state.stage);
      if (i >= 0 && i < CONFIG.stages.length - 1) {{
        state.stage = CONFIG.stages[i + 1];
        render();
      }}
    }}, CONFIG.stageIntervalMs);

    const fd = new FormData();
    fd.append("data", state.file, state.file.name);

    try {{
      const r = await fetch(CONFIG.uploadUrl, {{ method: "POST", body: fd }});
      if (stageTimer !== null) {{ clearInterval(stageTimer); stageTimer = null; }}
      if (!r.ok) {{
        throw new Error(await readError(r));
      }}
      const result = await r.json();
      const link = result.data && result.data.webViewLink;
      const jobId = findJobId(result);
      if (link) {{
        complete(String(link));
      }} else if (jobId) {{
        startPolling(jobId);
      }} else {{
        throw new Error(MSG.invalidResponse);
      }}
    }} catch (e) {{
      console.error("Error:", e);
      submitError(e && e.message ? e.message : "Unknown error");
    }}
  }}

  function reset() {{
    clearTimers();
    state.file = null;
    state.status = "idle";
    state.error = "";
    state.stage = "";
    state.resultLink = "";
    state.jobId = "";
    state.pollingAttempts = 0;
    el("fileInput").value = "";
    render();
  }}

  const drop = el("dropZone");
  drop.addEventListener("click", () => el("fileInput").click());
  drop.addEventListener("dragover", (ev) => {{ ev.preventDefault(); drop.classList.add("dragging"); }});
  drop.addEventListener("dragleave", (ev) => {{ ev.preventDefault(); drop.classList.remove("dragging"); }});
  drop.addEventListener("drop", (ev) => {{
    ev.preventDefault();
    drop.classList.remove("dragging");
    const files = ev.dataTransfer && ev.dataTransfer.files;
    selectFile(files && files[0], true);
  }});
  el("fileInput").addEventListener("change", (ev) => {{
    const files = ev.target.files;
    selectFile(files && files[0], false);
  }});
  el("submitBtn").addEventListener("click", submit);
  el("resetBtn").addEventListener("click", reset);
  window.addEventListener("beforeunload", clearTimers);

  render();
}})();
</script>
</body>
</html>
"""
