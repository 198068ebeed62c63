"""
QuickNote - Note Page Rendering
=================================

What:  Renders the single interactive HTML page used by browsers.
How:   One self-contained document (inline CSS and JS). The note id and
       content are HTML-escaped into the markup; the values the script needs
       are embedded as JSON literals with "</" escaped so note text can never
       close the <script> element.

Page behaviour:
    - textarea pre-filled with the note content
    - once a second, if the text changed, POST {"noteId", "content"} as JSON
      to <app-root>/noteid/<id> (or <app-root> for a new note)
    - on success, remember the returned id and rewrite the address bar to
      <app-root>/noteid/<id> with history.replaceState
    - <app-root> is the current path up to "/noteid/", so the page keeps
      working behind a reverse-proxy subpath
"""

import html
import json
from string import Template

_PAGE = Template("""<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="UTF-8">
<meta name="viewport" content="width=device-width, initial-scale=1.0">
<link rel="icon" href="/favicon.ico" type="image/x-icon">
<title>Note</title>
<style>
*, *::before, *::after { margin: 0; padding: 0; box-sizing: border-box; }
body { font-family: -apple-system, BlinkMacSystemFont, "Segoe UI", Roboto, sans-serif; color: #1E293B; background: #FFFFFF; }
.container { display: flex; flex-direction: column; height: 100vh; height: 100dvh; }
.header { display: flex; justify-content: space-between; align-items: center; gap: 12px; padding: 12px 20px; border-bottom: 1px solid #E2E8F0; }
.header h1 { font-size: 20px; font-weight: 700; }
.note-id { font-size: 12px; color: #94A3B8; font-family: "SF Mono", Menlo, Consolas, monospace; background: #EFF6FF; padding: 2px 8px; border-radius: 4px; }
.note-id:empty { display: none; }
.btn { padding: 7px 14px; border: 1px solid #E2E8F0; background: #FFFFFF; color: #64748B; border-radius: 6px; cursor: pointer; font: inherit; font-size: 13px; }
.btn:hover { color: #2563EB; border-color: #2563EB; }
.editor-wrap { flex: 1; display: flex; padding: 12px; min-height: 0; }
textarea { flex: 1; border: 1px solid #E2E8F0; border-radius: 12px; padding: 20px; font-family: "SF Mono", Menlo, Consolas, monospace; font-size: 14px; line-height: 1.6; resize: none; background: #F8FAFC; outline: none; }
textarea:focus { border-color: #2563EB; }
.status-bar { display: flex; justify-content: space-between; padding: 8px 20px; font-size: 12px; color: #64748B; background: #EFF6FF; border-top: 1px solid #E2E8F0; }
.status-bar.error { color: #EF4444; }
@media print {
  .header, .status-bar { display: none; }
  textarea { border: none; background: #FFFFFF; }
}
</style>
</head>
<body>
<div class="container">
  <div class="header">
    <div>
      <h1>&#9998; Note <span class="note-id" id="noteInfo">$note_id_html</span></h1>
    </div>
    <div>
      <button class="btn" onclick="newNote()" title="New Note">New</button>
      <button class="btn" onclick="copyNoteLink()" title="Copy Link">Link</button>
    </div>
  </div>
  <div class="editor-wrap">
    <textarea id="content" placeholder="Start typing your note...">
$content_html</textarea>
  </div>
  <div class="status-bar" id="statusBar">
    <span id="statusText">Ready</span>
    <span id="charCount"></span>
  </div>
</div>
<script>
const basePath = window.location.pathname.replace(/\\/noteid\\/.*$$/, '');
const appBase = basePath.endsWith('/') ? basePath : basePath + '/';
let currentNoteId = $note_id_json;
const textarea = document.getElementById('content');
const statusBar = document.getElementById('statusBar');
const statusText = document.getElementById('statusText');
const charCount = document.getElementById('charCount');
let lastSaved = textarea.value;

function setStatus(text, isError) {
  statusText.textContent = text;
  statusBar.classList.toggle('error', !!isError);
}

function updateCharCount() {
  const len = textarea.value.length;
  charCount.textContent = len ? len + ' chars' : '';
}

function newNote() {
  window.location.href = appBase;
}

function copyNoteLink() {
  if (!currentNoteId) { setStatus('Save a note first'); return; }
  const link = window.location.origin + appBase + 'noteid/' + currentNoteId;
  navigator.clipboard.writeText(link).then(function () { setStatus('Link copied'); });
}

function autoSave() {
  const text = textarea.value;
  if (text === lastSaved) return;
  setStatus('Saving...');
  const saveUrl = currentNoteId ? appBase + 'noteid/' + currentNoteId : appBase;
  fetch(saveUrl, {
    method: 'POST',
    headers: { 'Content-Type': 'application/json' },
    body: JSON.stringify({ noteId: currentNoteId, content: text })
  })
    .then(function (response) {
      if (!response.ok) throw new Error('HTTP ' + response.status);
      return response.json();
    })
    .then(function (data) {
      if (!data.success) { setStatus('Error: ' + (data.error || 'Save failed'), true); return; }
      lastSaved = text;
      currentNoteId = data.noteId;
      const newPath = appBase + 'noteid/' + data.noteId;
      if (window.location.pathname !== newPath) {
        window.history.replaceState({}, '', newPath);
        document.getElementById('noteInfo').textContent = data.noteId;
      }
      setStatus('Saved');
    })
    .catch(function (err) { setStatus('Error: ' + err.message, true); });
}

textarea.addEventListener('keydown', function (e) {
  if (e.key !== 'Tab') return;
  e.preventDefault();
  const start = this.selectionStart;
  this.value = this.value.substring(0, start) + '\\t' + this.value.substring(this.selectionEnd);
  this.selectionStart = this.selectionEnd = start + 1;
  updateCharCount();
});
textarea.addEventListener('input', updateCharCount);

setInterval(autoSave, 1000);
updateCharCount();
textarea.focus();
</script>
</body>
</html>
""")


def _js_literal(value: str) -> str:
    """JSON string literal that is also safe inside an inline <script>."""
    return json.dumps(value).replace("</", "<\\/")


def render_note_page(note_id: str, content: str) -> str:
    """
    Full HTML document for `note_id` with `content` in the editor.

    An empty `note_id` renders the new-note screen; the first auto-save then
    receives a generated id from the server.
    """
    return _PAGE.substitute(
        note_id_html=html.escape(note_id),
        content_html=html.escape(content),
        note_id_json=_js_literal(note_id),
    )
