# flask_app.py
from flask import Flask, render_template_string, jsonify, request
import os
from urllib.parse import quote

from flashcard_loader import (
    KIND_CATEGORIES,
    KIND_SUBJECTS,
    CategoryNotFound,
    FlashcardError,
    get_all_combined,
    get_category,
    load_tree,
    slugify,
)

app = Flask(__name__)
BASE_DIR = os.path.dirname(os.path.abspath(__file__))
app.config["FLASHCARDS_DIR"] = os.environ.get("FLASHCARDS_DIR") or os.path.join(BASE_DIR, "flashcards")
app.config["FLASHCARDS_TITLE"] = os.environ.get("FLASHCARDS_TITLE") or "Flashcards"

# Response discriminant: categories | subjects | combined
KIND_HEADER = "X-Flashcards-Kind"
KIND_COMBINED = "combined"
FLAT_GROUP = "All Subjects"

# -----------------------------
# Helpers
# -----------------------------
def _log_warnings(warnings):
    for w in warnings:
        app.logger.warning(w)


def _library_groups(result):
    """Home page view: flat layout shows as a single 'All Subjects' group."""
    if result.kind == KIND_CATEGORIES:
        categories = result.items
    else:
        categories = [{"category": FLAT_GROUP, "subjects": result.items}] if result.items else []

    groups = []
    for c in categories:
        subjects = [
            {
                "name": s["subject"],
                "slug": slugify(s["subject"]),
                "description": s.get("description") or "",
                "count": len(s["cards"]),
            }
            for s in c["subjects"]
        ]
        groups.append({
            "name": c["category"],
            "slug": slugify(c["category"]),
            "linkable": result.kind == KIND_CATEGORIES,
            "subjects": subjects,
            "count": sum(s["count"] for s in subjects),
        })
    return groups


# -----------------------------
# Templates
# -----------------------------
THEME_CSS = """
    :root{
      --bg:#eef2f8;
      --card:#ffffff;
      --text:#1a202c;
      --muted:#5a677d;
      --accent:#3182ce;
      --border:rgba(15,23,42,0.10);
      --shadow: 0 14px 40px rgba(15,23,42,0.10);
      --glow: rgba(99,179,237,0.25);
    }
    body.dark{
      --bg:#0b1220;
      --card:#0f1a2e;
      --text:#e6edf7;
      --muted:#9fb0c7;
      --accent:#63b3ed;
      --border:rgba(255,255,255,0.10);
      --shadow: 0 14px 40px rgba(0,0,0,0.35);
      --glow: rgba(99,179,237,0.25);
    }
    body{
      margin:0;
      font-family: Inter, Segoe UI, system-ui, -apple-system, sans-serif;
      background: radial-gradient(1200px 600px at 20% -10%, var(--glow), transparent 60%),
                  var(--bg);
      color: var(--text);
      min-height:100vh;
      box-sizing:border-box;
    }
    .theme-btn{
      padding: 8px 12px;
      border-radius: 10px;
      cursor: pointer;
      font-size: 13px;
      font-weight: 700;
      border: 1px solid var(--border);
      background: var(--card);
      color: var(--text);
    }
"""

THEME_JS = """
    (function(){
      const KEY = 'flashcards-theme';
      const btn = document.getElementById('theme-btn');
      function apply(dark){
        document.body.classList.toggle('dark', dark);
        if (btn) btn.textContent = dark ? 'Light mode' : 'Dark mode';
      }
      apply(localStorage.getItem(KEY) === 'dark');
      btn && btn.addEventListener('click', () => {
        const dark = !document.body.classList.contains('dark');
        localStorage.setItem(KEY, dark ? 'dark' : 'light');
        apply(dark);
      });
    })();
"""

LIBRARY_HTML = """
<!doctype html>
<html>
<head>
  <meta charset="utf-8">
  <title>{{ title }}</title>
  <meta name="viewport" content="width=device-width, initial-scale=1">
  <style>
    {{ theme_css|safe }}
    body{ padding: 40px 18px 60px; }
    .wrap{max-width:1100px;margin:0 auto;}
    .top{
      display:flex;
      gap:14px;
      align-items:flex-end;
      justify-content:space-between;
      flex-wrap:wrap;
      margin-bottom:18px;
    }
    .title{
      font-size: 34px;
      font-weight: 900;
      letter-spacing: -0.02em;
      margin:0;
    }
    .subtitle{
      margin:6px 0 0;
      color: var(--muted);
      font-weight: 600;
    }
    .search{
      min-width: 260px;
      max-width: 420px;
      width: 100%;
      padding: 12px 14px;
      border-radius: 14px;
      border: 1px solid var(--border);
      background: var(--card);
      color: var(--text);
      outline: none;
    }
    .study-all{
      display:inline-block;
      margin: 8px 0 22px;
      padding: 12px 20px;
      border-radius: 12px;
      background: var(--accent);
      color: #fff;
      font-weight: 800;
      text-decoration: none;
      box-shadow: var(--shadow);
    }
    .group{ margin-top: 28px; }
    .group-head{
      display:flex;
      justify-content:space-between;
      align-items:center;
      padding: 10px 14px;
      border: 1px solid var(--border);
      border-radius: 12px;
      background: var(--card);
      text-decoration:none;
      color: var(--text);
    }
    .group-name{ font-size: 20px; font-weight: 800; }
    .meta{
      color: var(--muted);
      font-size: 12px;
      font-weight: 700;
    }
    .grid{
      display:grid;
      grid-template-columns: repeat(auto-fill, minmax(240px, 1fr));
      gap: 14px;
      margin-top: 14px;
    }
    .card{
      display:block;
      text-decoration:none;
      color: var(--text);
      background: var(--card);
      border: 1px solid var(--border);
      border-radius: 18px;
      padding: 16px 16px 14px;
      box-shadow: var(--shadow);
      transition: transform .12s ease, border-color .12s ease;
      position: relative;
      overflow:hidden;
    }
    .card::before{
      content:"";
      position:absolute;
      inset:-2px -2px auto -2px;
      height: 4px;
      background: linear-gradient(90deg, var(--accent), rgba(99,179,237,0.2), transparent);
    }
    .card:hover{
      transform: translateY(-2px);
      border-color: rgba(99,179,237,0.35);
    }
    .card-title{
      font-weight: 900;
      font-size: 16px;
      line-height: 1.25;
      margin: 2px 0 8px;
    }
    .card-desc{ color: var(--muted); font-size: 13px; }
    .empty{
      margin-top: 18px;
      padding: 18px;
      border: 1px dashed var(--border);
      border-radius: 18px;
      color: var(--muted);
      font-weight: 700;
    }
  </style>
</head>
<body>
  <div class="wrap">
    <div class="top">
      <div>
        <h1 class="title">{{ title }}</h1>
        <p class="subtitle">{{ total_subjects }} subjects, {{ total_cards }} cards</p>
      </div>
      <div>
        <input id="q" class="search" placeholder="Search subjects..." autocomplete="off">
        <button id="theme-btn" class="theme-btn" type="button">Dark mode</button>
      </div>
    </div>

    {% if groups|length == 0 %}
      <div class="empty">No flashcards found under the content folder.</div>
    {% else %}
      <a class="study-all" href="/study/all">Study All Flashcards ({{ total_cards }} cards)</a>
      {% for group in groups %}
        <div class="group">
          {% if group.linkable %}
          <a class="group-head" href="/study/category/{{ group.slug|urlencode }}">
          {% else %}
          <div class="group-head">
          {% endif %}
            <span class="group-name">{{ group.name }}</span>
            <span class="meta">{{ group.subjects|length }} subjects &middot; {{ group.count }} cards{% if group.linkable %} &middot; View all &rarr;{% endif %}</span>
          {% if group.linkable %}</a>{% else %}</div>{% endif %}

          <div class="grid">
            {% for s in group.subjects %}
              <a class="card" href="/subject/{{ group.slug|urlencode }}/{{ s.slug|urlencode }}" data-name="{{ s.name|lower }}">
                <div class="card-title">{{ s.name }}</div>
                <div class="card-desc">{{ s.description }}</div>
                <div class="meta">{{ s.count }} cards</div>
              </a>
            {% endfor %}
          </div>
        </div>
      {% endfor %}
    {% endif %}
  </div>

  <script>
    const q = document.getElementById('q');
    const cards = Array.from(document.querySelectorAll('.card'));
    function filter(){
      const v = (q.value || '').trim().toLowerCase();
      cards.forEach(c => c.style.display = c.dataset.name.includes(v) ? '' : 'none');
    }
    q && q.addEventListener('input', filter);
    {{ theme_js|safe }}
  </script>
</body>
</html>
"""

STUDY_HTML = r"""
<!doctype html>
<html>
<head>
  <meta charset="utf-8">
  <title>{{ heading }}</title>
  <meta name="viewport" content="width=device-width, initial-scale=1">
  <script src="https://cdn.jsdelivr.net/npm/marked/marked.min.js"></script>
  <style>
    {{ theme_css|safe }}
    body{ padding: 24px 18px 60px; }
    .wrap{ max-width: 900px; margin: 0 auto; }
    .top-nav{
      display:flex;
      justify-content:space-between;
      align-items:center;
      gap: 12px;
      margin-bottom: 18px;
    }
    .home-btn{ color: var(--accent); text-decoration:none; font-weight: 800; }
    .heading{ font-size: 28px; font-weight: 900; margin: 0; }
    .desc{ color: var(--muted); margin: 6px 0 18px; }

    .fc-toolbar{
      display:flex;
      gap: 10px;
      align-items:center;
      flex-wrap: wrap;
      margin-bottom: 10px;
    }
    .fc-pill{
      padding: 7px 10px;
      border-radius: 999px;
      background: rgba(99,179,237,0.14);
      border: 1px solid rgba(99,179,237,0.22);
      font-weight: 800;
      font-size: 12px;
    }
    .fc-btn{
      padding: 8px 12px;
      border-radius: 10px;
      border: 1px solid var(--border);
      background: var(--card);
      color: var(--text);
      font-weight: 800;
      cursor: pointer;
    }
    .fc-btn.active{ background: var(--accent); color: #fff; }
    .fc-btn:disabled{ opacity: 0.45; cursor: not-allowed; }
    .fc-progress{
      height: 6px;
      border-radius: 999px;
      background: var(--border);
      overflow: hidden;
      margin-bottom: 14px;
    }
    .fc-progress-bar{ height: 100%; width: 0; background: var(--accent); transition: width .2s ease; }
    .fc-hint{ color: var(--muted); font-size: 12px; margin-bottom: 12px; }
    .fc-card{
      min-height: 320px;
      padding: 32px;
      border-radius: 18px;
      border: 1px solid var(--border);
      background: var(--card);
      box-shadow: var(--shadow);
      cursor: pointer;
      line-height: 1.6;
      overflow: auto;
    }
    .fc-side{ font-size: 11px; font-weight: 900; letter-spacing: .08em; color: var(--muted); margin-bottom: 12px; }
    .fc-card pre{ overflow:auto; padding: 12px; border-radius: 8px; background: rgba(127,127,127,0.12); }
    .fc-modal{
      position: fixed;
      inset: 0;
      display: none;
      align-items: center;
      justify-content: center;
      background: rgba(0,0,0,0.45);
    }
    .fc-modal.open{ display:flex; }
    .fc-modal-box{
      padding: 28px;
      border-radius: 18px;
      background: var(--card);
      box-shadow: var(--shadow);
      text-align: center;
      max-width: 360px;
    }
    .empty{
      margin-top: 18px;
      padding: 18px;
      border: 1px dashed var(--border);
      border-radius: 18px;
      color: var(--muted);
      font-weight: 700;
    }
  </style>
</head>
<body>
  <div class="wrap">
    <div class="top-nav">
      <a class="home-btn" href="/">&larr; Back to library</a>
      <button id="theme-btn" class="theme-btn" type="button">Dark mode</button>
    </div>

    <h1 class="heading" id="fc-heading">{{ heading }}</h1>
    <p class="desc" id="fc-desc">Loading flashcards...</p>

    <div id="fc-root"></div>
  </div>

  <div class="fc-modal" id="fc-modal">
    <div class="fc-modal-box">
      <h2>Deck complete</h2>
      <p id="fc-modal-text"></p>
      <button class="fc-btn" id="fc-modal-close">Keep studying</button>
      <button class="fc-btn" id="fc-modal-restart">Start over</button>
    </div>
  </div>

  <script>
    {{ theme_js|safe }}

    const API_URL = {{ api_url|tojson }};
    const SUBJECT_SLUG = {{ subject_slug|tojson }};
    const CATEGORY_SLUG = {{ category_slug|tojson }};

    const root = document.getElementById('fc-root');
    const modal = document.getElementById('fc-modal');
    let cards = [];
    let displayCards = [];
    let fcIndex = 0;
    let isFlipped = false;
    let isShuffled = false;

    function slugify(name) {
      return String(name || '').trim().toLowerCase().replace(/\s+/g, '-');
    }

    function escapeHtml(str) {
      return String(str)
        .replaceAll('&', '&amp;')
        .replaceAll('<', '&lt;')
        .replaceAll('>', '&gt;')
        .replaceAll('"', '&quot;')
        .replaceAll("'", '&#039;');
    }

    function renderMarkdown(text) {
      const src = String(text || '');
      if (window.marked) return window.marked.parse(src);
      return escapeHtml(src).replaceAll('\n', '<br>');
    }

    function shuffleArray(arr) {
      const out = arr.slice();
      for (let i = out.length - 1; i > 0; i--) {
        const j = Math.floor(Math.random() * (i + 1));
        [out[i], out[j]] = [out[j], out[i]];
      }
      return out;
    }

    function showMessage(msg) {
      document.getElementById('fc-desc').textContent = '';
      root.innerHTML = `<div class="empty">${escapeHtml(msg)} <a class="home-btn" href="/">Back to Home</a></div>`;
    }

    function buildFlashcardsUI() {
      root.innerHTML = `
        <div class="fc-toolbar">
          <div class="fc-pill" id="fc-progress">0 / 0</div>
          <button class="fc-btn" id="fc-prev">Prev</button>
          <button class="fc-btn" id="fc-flip">Flip</button>
          <button class="fc-btn" id="fc-next">Next</button>
          <button class="fc-btn" id="fc-shuffle">Shuffle</button>
          <button class="fc-btn" id="fc-reset">Reset</button>
        </div>
        <div class="fc-progress"><div class="fc-progress-bar" id="fc-bar"></div></div>
        <div class="fc-hint">Click card or press <b>Space</b>/<b>Enter</b> to flip. Use <b>&larr;</b>/<b>&rarr;</b> for prev/next.</div>
        <div class="fc-card" id="fc-card" role="button" tabindex="0"></div>
      `;
      document.getElementById('fc-prev').onclick = () => goRelative(-1);
      document.getElementById('fc-next').onclick = () => goRelative(1);
      document.getElementById('fc-flip').onclick = flip;
      document.getElementById('fc-card').onclick = flip;
      document.getElementById('fc-shuffle').onclick = toggleShuffle;
      document.getElementById('fc-reset').onclick = () => goTo(0);
    }

    function renderCard() {
      const total = displayCards.length;
      const c = displayCards[fcIndex] || {};
      document.getElementById('fc-progress').textContent = `${fcIndex + 1} / ${total}`;
      document.getElementById('fc-bar').style.width = `${((fcIndex + 1) / total) * 100}%`;
      document.getElementById('fc-prev').disabled = fcIndex <= 0;
      document.getElementById('fc-next').disabled = fcIndex >= total - 1;
      document.getElementById('fc-shuffle').classList.toggle('active', isShuffled);

      const side = isFlipped ? 'Back' : 'Front';
      const body = isFlipped ? c.back : c.front;
      document.getElementById('fc-card').innerHTML =
        `<div class="fc-side">${side}</div><div class="fc-body">${renderMarkdown(body)}</div>`;
    }

    function goTo(idx) {
      if (idx < 0 || idx >= displayCards.length) return;
      const forward = idx > fcIndex;
      fcIndex = idx;
      isFlipped = false;
      renderCard();
      if (forward && fcIndex === displayCards.length - 1) openModal();
    }

    function goRelative(delta) {
      goTo(fcIndex + delta);
    }

    function flip() {
      isFlipped = !isFlipped;
      renderCard();
    }

    function toggleShuffle() {
      isShuffled = !isShuffled;
      displayCards = isShuffled ? shuffleArray(cards) : cards.slice();
      fcIndex = 0;
      isFlipped = false;
      renderCard();
    }

    function openModal() {
      document.getElementById('fc-modal-text').textContent =
        `You reached the last of ${displayCards.length} cards.`;
      modal.classList.add('open');
    }

    function closeModal() {
      modal.classList.remove('open');
    }

    document.getElementById('fc-modal-close').onclick = closeModal;
    document.getElementById('fc-modal-restart').onclick = () => { closeModal(); goTo(0); };

    document.addEventListener('keydown', (e) => {
      if (e.target instanceof HTMLInputElement || e.target instanceof HTMLTextAreaElement) return;
      if (!displayCards.length) return;

      if (modal.classList.contains('open')) {
        if (['Escape', ' ', 'Enter', 'ArrowLeft', 'ArrowRight'].includes(e.key)) {
          e.preventDefault();
          closeModal();
        }
        return;
      }

      if (e.key === 'ArrowRight') {
        e.preventDefault();
        goRelative(1);
      } else if (e.key === 'ArrowLeft') {
        e.preventDefault();
        goRelative(-1);
      } else if (e.key === ' ' || e.key === 'Enter') {
        e.preventDefault();
        flip();
      }
    });

    async function loadDeck() {
      let data, kind;
      try {
        const res = await fetch(API_URL, { cache: 'no-store' });
        data = await res.json();
        if (!res.ok) throw new Error((data && data.error) || 'Failed to load flashcards');
        kind = res.headers.get({{ kind_header|tojson }});
      } catch (e) {
        showMessage(e.message || 'Failed to load flashcards.');
        return;
      }

      let heading = {{ heading|tojson }};
      let description = '';
      let subjects = Array.isArray(data) ? data : [];
      if (kind === 'categories') {
        const cat = subjects.find(c => slugify(c.category) === CATEGORY_SLUG);
        subjects = cat ? cat.subjects : [];
      }

      if (SUBJECT_SLUG) {
        const hit = subjects.find(s => slugify(s.subject) === SUBJECT_SLUG);
        if (!hit) {
          showMessage('Subject not found.');
          return;
        }
        subjects = [hit];
        heading = hit.subject;
        description = hit.description || '';
      } else if (subjects.length === 1 && {{ single_subject|tojson }}) {
        heading = subjects[0].subject;
        description = subjects[0].description || '';
      } else {
        description = `${subjects.length} subjects`;
      }

      cards = subjects.flatMap(s => Array.isArray(s.cards) ? s.cards : []);
      displayCards = cards.slice();
      document.getElementById('fc-heading').textContent = heading;
      document.title = heading;
      document.getElementById('fc-desc').textContent = description;

      if (!cards.length) {
        showMessage('No flashcards found.');
        return;
      }
      buildFlashcardsUI();
      renderCard();
    }

    loadDeck();
  </script>
</body>
</html>
"""


def _render_study(heading, api_url, subject_slug=None, category_slug=None, single_subject=False):
    return render_template_string(
        STUDY_HTML,
        heading=heading,
        api_url=api_url,
        subject_slug=subject_slug,
        category_slug=category_slug,
        single_subject=single_subject,
        kind_header=KIND_HEADER,
        theme_css=THEME_CSS,
        theme_js=THEME_JS,
    )


# -----------------------------
# Routes
# -----------------------------
@app.route("/")
def home():
    root = app.config["FLASHCARDS_DIR"]
    try:
        result = load_tree(root)
    except FlashcardError:
        app.logger.exception("Error loading flashcards from %s", root)
        groups = []
    else:
        _log_warnings(result.warnings)
        groups = _library_groups(result)

    return render_template_string(
        LIBRARY_HTML,
        title=app.config["FLASHCARDS_TITLE"],
        groups=groups,
        total_subjects=sum(len(g["subjects"]) for g in groups),
        total_cards=sum(g["count"] for g in groups),
        theme_css=THEME_CSS,
        theme_js=THEME_JS,
    )


@app.route("/study/all")
def study_all():
    return _render_study("All Flashcards", "/api/flashcards?mode=all", single_subject=True)


@app.route("/study/category/<slug>")
def study_category(slug):
    heading = slug.replace("-", " ").title()
    return _render_study(heading, "/api/flashcards?category=" + quote(slug))


@app.route("/subject/<category>/<slug>")
def study_subject(category, slug):
    category_slug = slugify(category)
    if category_slug == slugify(FLAT_GROUP):
        # Full listing: flat layout answers with subjects, otherwise the
        # page picks the category out of the tree
        api_url = "/api/flashcards"
    else:
        api_url = "/api/flashcards?category=" + quote(category_slug)
    return _render_study(
        slug.replace("-", " ").title(),
        api_url,
        subject_slug=slugify(slug),
        category_slug=category_slug,
    )


# ---------- API ----------
@app.route("/api/flashcards")
def api_flashcards():
    root = app.config["FLASHCARDS_DIR"]
    category = (request.args.get("category") or "").strip()
    mode = request.args.get("mode")

    try:
        if category:
            data, warnings = get_category(root, category)
            kind = KIND_SUBJECTS
        elif mode == "all":
            combined, warnings = get_all_combined(root)
            data = [combined]
            kind = KIND_COMBINED
        else:
            result = load_tree(root)
            data, warnings, kind = result.items, result.warnings, result.kind
        _log_warnings(warnings)
        resp = jsonify(data)
    except CategoryNotFound:
        return jsonify({"error": "Category not found"}), 404
    except Exception:
        app.logger.exception("Error loading flashcards from %s", root)
        return jsonify([]), 500

    resp.headers[KIND_HEADER] = kind
    return resp


if __name__ == "__main__":
    app.run(debug=True, port=8000)
