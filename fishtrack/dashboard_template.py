"""Single-file HTML template for the dashboard. Reloads /api/state every 5 min, status line every minute."""

TEMPLATE = r"""<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<meta name="viewport" content="width=device-width, initial-scale=1">
<title>Fishtest Tracker</title>
<script src="https://cdn.jsdelivr.net/npm/chart.js@4"></script>
<script src="https://cdn.jsdelivr.net/npm/chartjs-adapter-date-fns@3"></script>
<style>
  :root {
    --bg: #0f1117;
    --surface: #1a1d27;
    --surface2: #232733;
    --border: #2e3348;
    --text: #e1e4ed;
    --text2: #8b90a5;
    --accent: #6c9bff;
    --green: #4ade80;
    --red: #f87171;
  }
  * { box-sizing: border-box; margin: 0; padding: 0; }
  body {
    font-family: 'SF Mono', 'Cascadia Code', 'Fira Code', monospace;
    background: var(--bg);
    color: var(--text);
    line-height: 1.6;
  }
  a { color: var(--accent); text-decoration: none; }
  a:hover { text-decoration: underline; }
  .header {
    background: var(--surface);
    border-bottom: 1px solid var(--border);
    padding: 16px 32px;
    display: flex;
    align-items: center;
    justify-content: space-between;
    position: sticky;
    top: 0;
    z-index: 100;
  }
  .header h1 { font-size: 16px; font-weight: 600; letter-spacing: 0.5px; }
  .header h1 span { color: var(--accent); }
  .status { font-size: 12px; color: var(--text2); }
  .status.error { color: var(--red); }

  .container { max-width: 1200px; margin: 0 auto; padding: 24px 32px; }
  .card {
    background: var(--surface);
    border: 1px solid var(--border);
    border-radius: 8px;
    padding: 20px;
    margin-bottom: 16px;
  }
  .card-title {
    font-size: 11px;
    text-transform: uppercase;
    letter-spacing: 1.5px;
    color: var(--text2);
    margin-bottom: 12px;
  }

  #filterInput {
    width: 100%;
    padding: 8px 12px;
    background: var(--bg);
    border: 1px solid var(--border);
    border-radius: 6px;
    color: var(--text);
    font-family: inherit;
    font-size: 13px;
    margin-bottom: 12px;
  }

  .tests-table { width: 100%; border-collapse: collapse; font-size: 13px; }
  .tests-table th {
    text-align: left;
    font-weight: 600;
    color: var(--text2);
    font-size: 11px;
    text-transform: uppercase;
    letter-spacing: 1px;
    padding: 8px 12px;
    border-bottom: 1px solid var(--border);
  }
  .tests-table td { padding: 8px 12px; border-bottom: 1px solid var(--border); }
  .tests-table tr:last-child td { border-bottom: none; }
  .tests-table td.placeholder { text-align: center; color: var(--text2); }
  .tests-table td.placeholder.error { color: var(--red); }
  .tint-regression { background: rgb(80 200 229 / 30%); }
  .tint-improvement { background: rgb(117 187 118 / 30%); }
  .dimmed-row { opacity: 0.45; }
  .branch-link { max-width: 260px; display: inline-block; overflow: hidden; text-overflow: ellipsis; white-space: nowrap; vertical-align: bottom; }

  #chartContainer { display: none; }
  .toggles { display: flex; gap: 8px; margin-bottom: 12px; }
  .toggle {
    font-family: inherit;
    font-size: 11px;
    padding: 4px 12px;
    border-radius: 12px;
    border: 1px solid var(--border);
    background: var(--surface2);
    color: var(--text2);
    cursor: pointer;
    text-transform: uppercase;
    letter-spacing: 1px;
  }
  .toggle.active { background: #1e3a5f; color: var(--accent); border-color: var(--accent); }
  #testEndedMessage {
    display: none;
    padding: 8px 12px;
    margin-bottom: 12px;
    border-radius: 6px;
    background: #3b1a1a;
    color: var(--red);
    font-size: 12px;
  }

  ::-webkit-scrollbar { width: 6px; }
  ::-webkit-scrollbar-track { background: var(--bg); }
  ::-webkit-scrollbar-thumb { background: var(--border); border-radius: 3px; }

  @media (max-width: 800px) { .container { padding: 16px; } }
</style>
</head>
<body>

<div class="header">
  <h1><span>&#9818;</span> Fishtest Tracker</h1>
  <div id="lastUpdateTime" class="status">Last update: N/A (or still loading)</div>
</div>

<div class="container">

  <div class="card">
    <div class="card-title">Active Tests</div>
    <input id="filterInput" type="text" placeholder="Filter by user, branch or test id...">
    <table class="tests-table" id="testsTable">
      <thead><tr><th>Test</th><th>User</th><th>Branch</th><th>LLR</th><th>Games (score)</th></tr></thead>
      <tbody><tr><td colspan="5" class="placeholder">Loading...</td></tr></tbody>
    </table>
  </div>

  <div class="card" id="chartContainer">
    <div class="card-title" id="chartTitle"></div>
    <div id="testEndedMessage">This test has ended. Showing the last recorded history.</div>
    <div class="toggles">
      <button class="toggle" id="toggleScore" data-metric="score">Score</button>
      <button class="toggle" id="toggleLLR" data-metric="llr">LLR</button>
    </div>
    <canvas id="progressChart"></canvas>
  </div>

</div>

<script>
const filterInput = document.getElementById("filterInput");
const tableBody = document.querySelector("#testsTable tbody");
const chartContainer = document.getElementById("chartContainer");
const chartTitle = document.getElementById("chartTitle");
const endedMessage = document.getElementById("testEndedMessage");
const statusEl = document.getElementById("lastUpdateTime");
const toggles = document.querySelectorAll(".toggle");

let chart = null;

function esc(s) {
  return String(s).replace(/[&<>"']/g, c => ({"&": "&amp;", "<": "&lt;", ">": "&gt;", '"': "&quot;", "'": "&#39;"}[c]));
}

async function post(url, body) {
  const resp = await fetch(url, {
    method: "POST",
    headers: {"Content-Type": "application/json"},
    body: JSON.stringify(body),
  });
  return resp.json();
}

function renderTable(table) {
  if (table.placeholder) {
    const cls = table.is_error ? "placeholder error" : "placeholder";
    tableBody.innerHTML = `<tr><td colspan="5" class="${cls}">${esc(table.placeholder)}</td></tr>`;
    return;
  }
  tableBody.innerHTML = table.rows.map(r => {
    const classes = [];
    if (r.paused) classes.push("dimmed-row");
    if (r.tint) classes.push("tint-" + r.tint);
    return `<tr class="${classes.join(" ")}">
      <td><a href="${esc(r.test_url)}" title="${esc(r.id)}" target="_blank" rel="noopener noreferrer">${esc(r.short_id)}</a></td>
      <td><a href="#" class="username-filter-link" data-username="${esc(r.username)}">${esc(r.username)}</a></td>
      <td><a href="#" class="branch-link" title="${esc(r.branch)}" data-test-id="${esc(r.id)}" data-branch-name="${esc(r.branch)}">${esc(r.branch)}</a></td>
      <td>${esc(r.llr_display)}</td>
      <td>${esc(r.games_display)}</td>
    </tr>`;
  }).join("");
}

function buildChart(view) {
  if (chart) chart.destroy();
  chart = new Chart(document.getElementById("progressChart").getContext("2d"), {
    type: "line",
    data: {
      datasets: view.datasets.map((d, i) => ({
        label: d.label,
        data: d.data,
        hidden: d.hidden,
        borderColor: i === 0 ? "rgb(75, 192, 192)" : "rgb(255, 99, 132)",
        tension: 0.1,
        spanGaps: false,
      })),
    },
    options: {
      responsive: true,
      maintainAspectRatio: true,
      scales: {
        x: {
          type: "time",
          time: {unit: "minute", tooltipFormat: "MMM d, HH:mm:ss", displayFormats: {minute: "HH:mm", hour: "HH:mm"}},
          title: {display: true, text: "Time"},
        },
        y: {title: {display: true, text: "Value"}},
      },
      plugins: {tooltip: {mode: "index", intersect: false}},
    },
  });
}

function applyChart(view) {
  // Series visibility and axis bounds change in place, no rebuild
  view.datasets.forEach((d, i) => {
    chart.data.datasets[i].data = d.data;
    chart.data.datasets[i].hidden = d.hidden;
  });
  const y = chart.options.scales.y;
  y.min = view.yAxis.min === null ? undefined : view.yAxis.min;
  y.max = view.yAxis.max === null ? undefined : view.yAxis.max;
  y.beginAtZero = view.yAxis.beginAtZero;
  chart.update("none");
}

function renderChart(view, render) {
  if (!view) {
    chartContainer.style.display = "none";
    return;
  }
  chartContainer.style.display = "block";
  chartTitle.textContent = view.title;
  endedMessage.style.display = view.ended ? "block" : "none";
  toggles.forEach(t => t.classList.toggle("active", t.dataset.metric === view.metric));
  if (!chart || render.action === "rebuild") buildChart(view);
  applyChart(view);
  if (render.scroll) chartContainer.scrollIntoView({behavior: "smooth"});
}

function render(state) {
  statusEl.textContent = state.status;
  statusEl.classList.toggle("error", state.status.indexOf("Error") !== -1);
  renderTable(state.table);
  renderChart(state.chart, state.render);
}

async function loadState() {
  try {
    const resp = await fetch("/api/state");
    render(await resp.json());
  } catch (e) {
    statusEl.textContent = "Last update: Error loading";
    statusEl.classList.add("error");
  }
}

async function refreshStatus() {
  try {
    const resp = await fetch("/api/status-line");
    statusEl.textContent = (await resp.json()).status;
  } catch (e) {
    // server might be restarting, keep the old text
  }
}

filterInput.addEventListener("input", async () => {
  render(await post("/api/filter", {query: filterInput.value}));
});

tableBody.addEventListener("click", async (event) => {
  const target = event.target;
  if (target.classList.contains("branch-link")) {
    event.preventDefault();
    render(await post("/api/select", {id: target.dataset.testId, branch: target.dataset.branchName}));
  } else if (target.classList.contains("username-filter-link")) {
    event.preventDefault();
    filterInput.value = target.dataset.username;
    render(await post("/api/filter", {query: filterInput.value}));
    filterInput.focus();
  }
});

toggles.forEach(t => t.addEventListener("click", async () => {
  render(await post("/api/metric", {metric: t.dataset.metric}));
}));

loadState();
setInterval(refreshStatus, 60000);
setInterval(loadState, 5 * 60000);
</script>
</body>
</html>"""
