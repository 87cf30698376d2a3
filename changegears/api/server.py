"""
FastAPI server for the change gear calculator.

Provides REST API endpoints and a simple HTML UI. Calculations can be
bookmarked: GET /calculate accepts the same URL parameters as the UI link.
"""

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse
from pydantic import BaseModel, ValidationError

from changegears import __version__
from changegears.models.inputs import CalculationInputs, LengthUnit, ModuleUnit
from changegears.models.outputs import CalculationResult
from changegears.generator.calculator import ChangeGearCalculator

# Largest search a single request may run (about 10 s of work)
MAX_ARRANGEMENTS = 1_000_000

# Create FastAPI app
app = FastAPI(
    title="Change Gear Calculator API",
    description="""
    Finds lathe change gear trains for a desired thread lead.

    All arrangements of one or two gears per shaft are searched; trains with
    interfering gears or outside the shaft distance limits are rejected.
    """,
    version=__version__,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# HTML UI Template
HTML_UI = """
<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>Change Gear Calculator</title>
    <style>
        * { box-sizing: border-box; }
        body {
            font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif;
            max-width: 1400px;
            margin: 0 auto;
            padding: 20px;
            background: #f5f5f5;
            color: #333;
        }
        h1 { color: #2c3e50; border-bottom: 3px solid #3498db; padding-bottom: 10px; }
        .container { display: flex; gap: 20px; flex-wrap: wrap; }
        .input-section, .output-section {
            background: white;
            padding: 20px;
            border-radius: 8px;
            box-shadow: 0 2px 4px rgba(0,0,0,0.1);
        }
        .input-section { flex: 0 0 360px; }
        .output-section { flex: 1; min-width: 400px; overflow-x: auto; }
        label { display: block; font-size: 12px; color: #666; margin-top: 8px; }
        input[type=text] { width: 100%; padding: 6px; border: 1px solid #ddd; border-radius: 4px; }
        .unit { font-size: 11px; color: #666; font-weight: normal; }
        button {
            padding: 12px 24px;
            font-size: 14px;
            cursor: pointer;
            border: none;
            border-radius: 4px;
            margin-top: 15px;
            background: #3498db;
            color: white;
        }
        button:hover { background: #2980b9; }
        table { border-collapse: collapse; font-size: 13px; }
        th, td { padding: 4px 8px; text-align: right; border-bottom: 1px solid #eee; }
        td.geartrain, th.geartrain { text-align: center; padding: 4px 2px; }
        .status { color: #666; font-style: italic; }
        .warning {
            background: #fff3cd;
            border: 1px solid #ffc107;
            padding: 12px;
            border-radius: 4px;
            margin-bottom: 10px;
        }
    </style>
</head>
<body>
    <h1>Change Gear Calculator</h1>
    <div class="container">
        <form class="input-section" id="changegears" onsubmit="runCalculation(event)">
            <label>Leadscrew lead</label>
            <input type="text" id="leadscrew-lead" value="3">
            <input type="radio" name="leadscrew-unit" id="leadscrew-mm" checked> mm
            <input type="radio" name="leadscrew-unit" id="leadscrew-tpi"> tpi
            <label>Number of shafts</label>
            <input type="text" id="shaft-count" value="3">
            <label>Input gears (comma separated)</label>
            <input type="text" id="input-gear-set" value="">
            <input type="checkbox" id="input-set-shared" checked> same as change gears
            <label>Change gears (comma separated)</label>
            <input type="text" id="change-gear-set" value="20,25,30,35,40,45,50,55,60,65,70,80">
            <label>Desired lead</label>
            <input type="text" id="desired-lead" value="1.25">
            <input type="radio" name="desired-unit" id="desired-mm" checked> mm
            <input type="radio" name="desired-unit" id="desired-tpi"> tpi
            <label>Gear module</label>
            <input type="text" id="module" value="1">
            <input type="radio" name="module-unit" id="module-mod" checked> mod
            <input type="radio" name="module-unit" id="module-dp"> DP
            <label>Input adjacent size <span class="unit">teeth</span></label>
            <input type="text" id="input-adjacent-size" value="">
            <label>Spacer size <span class="unit">teeth</span></label>
            <input type="text" id="spacer-size" value="">
            <label>Min shaft distance <span class="unit">mm</span></label>
            <input type="text" id="min-shaft-distance" value="">
            <label>Max shaft distance <span class="unit">mm</span></label>
            <input type="text" id="max-shaft-distance" value="">
            <label>Addendum <span class="unit">teeth</span></label>
            <input type="text" id="addendum" value="">
            <label>Results to show</label>
            <input type="text" id="max-results" value="">
            <button type="submit">Calculate</button>
            <p><a id="calculation-link" href="#">Link to this calculation</a></p>
        </form>

        <div class="output-section">
            <p class="status" id="calculation-status">Calculation status: Not started</p>
            <div id="warnings"></div>
            <table>
                <thead id="results-table-head"></thead>
                <tbody id="results-table-body"></tbody>
            </table>
        </div>
    </div>

    <script>
        const TEXT_FIELDS = ['leadscrew-lead', 'shaft-count', 'input-gear-set', 'change-gear-set',
            'desired-lead', 'module', 'input-adjacent-size', 'spacer-size',
            'min-shaft-distance', 'max-shaft-distance', 'addendum', 'max-results'];
        const CHECK_FIELDS = ['leadscrew-mm', 'leadscrew-tpi', 'input-set-shared',
            'desired-mm', 'desired-tpi', 'module-mod', 'module-dp'];

        function queryString() {
            const params = new URLSearchParams();
            TEXT_FIELDS.forEach(id => {
                const value = document.getElementById(id).value.trim();
                if (value.length > 0) params.append(id, value);
            });
            CHECK_FIELDS.forEach(id => {
                if (document.getElementById(id).checked) params.append(id, 'true');
            });
            return params.toString();
        }

        function loadFromUrl() {
            const params = new URLSearchParams(window.location.search);
            TEXT_FIELDS.forEach(id => {
                if (params.has(id)) document.getElementById(id).value = params.get(id);
            });
            CHECK_FIELDS.forEach(id => {
                if (params.has(id)) document.getElementById(id).checked = params.get(id).toLowerCase() === 'true';
            });
        }

        function updateLink() {
            document.getElementById('calculation-link').href = '/?' + queryString();
        }

        function renderResult(data) {
            const stats = data.statistics;
            const pct = stats.total > 0 ? Math.round((stats.found + stats.skipped + stats.discarded) / stats.total * 100) : 100;
            document.getElementById('calculation-status').textContent =
                `Calculation status (${pct}%): Found ${stats.found} valid solutions out of ${stats.total} ` +
                `possible arrangements (${stats.discarded} rejected and ${stats.skipped} optimized out)`;
            document.getElementById('warnings').innerHTML =
                data.warnings.map(w => `<div class="warning">${w}</div>`).join('');

            const shaftCount = data.input_summary.shaft_count;
            let head = '<tr><th>Match<br><span class="unit">%</span></th><th>Lead<br><span class="unit">mm</span></th>' +
                '<th>TPI<br><span class="unit">per inch</span></th><th class="geartrain">1</th><th class="geartrain"></th>';
            for (let i = 2; i < shaftCount; i++) head += `<th class="geartrain">${i}</th><th class="geartrain"></th>`;
            head += `<th class="geartrain">${shaftCount}</th><th>Tooth force<br><span class="unit">relative</span></th>` +
                '<th>Shaft distance<br><span class="unit">mm</span></th></tr>';
            document.getElementById('results-table-head').innerHTML = head;

            const line = '<s>&nbsp;&nbsp;</s>';
            let rows = '';
            data.trains.forEach(train => {
                let top = true;
                rows += `<tr><td>${train.match_percent.toFixed(2)}%</td><td>${train.lead_mm.toFixed(3)}</td>` +
                    `<td>${train.tpi.toFixed(2)}</td><td class="geartrain">${train.shafts[0].output_gear}<br>&nbsp;</td>` +
                    `<td class="geartrain">${line}<br>&nbsp;</td>`;
                train.shafts.slice(1, -1).forEach(shaft => {
                    rows += '<td class="geartrain">';
                    if (shaft.gear_count === 2) {
                        rows += top ? `${shaft.input_gear}<br>${shaft.output_gear}` : `${shaft.output_gear}<br>${shaft.input_gear}`;
                        top = !top;
                    } else {
                        rows += top ? `${shaft.input_gear}<br>&nbsp;` : `&nbsp;<br>${shaft.input_gear}`;
                    }
                    rows += '</td>';
                    rows += top ? `<td class="geartrain">${line}<br>&nbsp;</td>` : `<td class="geartrain">&nbsp;<br>${line}</td>`;
                });
                const last = train.shafts[train.shafts.length - 1].input_gear;
                rows += top ? `<td class="geartrain">${last}<br>&nbsp;</td>` : `<td class="geartrain">&nbsp;<br>${last}</td>`;
                rows += `<td>${train.max_force.toFixed(3)}</td><td>${train.shaft_distance.toFixed(1)}</td></tr>`;
            });
            document.getElementById('results-table-body').innerHTML = rows;
        }

        async function runCalculation(event) {
            if (event) event.preventDefault();
            updateLink();
            document.getElementById('calculation-status').textContent = 'Calculation status: Calculating...';
            try {
                const response = await fetch('/calculate?' + queryString());
                if (!response.ok) {
                    const err = await response.json();
                    throw new Error(typeof err.detail === 'string' ? err.detail : JSON.stringify(err.detail));
                }
                renderResult(await response.json());
            } catch (e) {
                document.getElementById('calculation-status').textContent = 'Calculation status: Error: ' + e.message;
            }
        }

        window.onload = () => {
            loadFromUrl();
            updateLink();
            document.getElementById('changegears').addEventListener('change', updateLink);
        };
    </script>
</body>
</html>
"""


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    version: str


class LinkResponse(BaseModel):
    """Bookmark link for a calculation."""
    query_string: str
    url: str


def _calculate(inputs: CalculationInputs) -> CalculationResult:
    # The search runs inside the request, so its size is capped up front
    total = inputs.arrangement_count
    if total > MAX_ARRANGEMENTS:
        raise HTTPException(
            status_code=400,
            detail=(
                f"Too many possible arrangements ({total}); the server limit is "
                f"{MAX_ARRANGEMENTS}. Use fewer shafts or gears, or run the "
                "calculation with the changegears command line tool."
            ),
        )
    try:
        return ChangeGearCalculator(inputs).generate_result()
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Internal error: {str(e)}")


@app.get("/", response_class=HTMLResponse)
async def root():
    """Serve the HTML UI."""
    return HTML_UI


@app.get("/health", response_model=HealthResponse, tags=["System"])
async def health_check():
    """Check if the API is running."""
    return HealthResponse(status="healthy", version=__version__)


@app.get("/example", response_model=CalculationInputs, tags=["Reference"])
async def get_example():
    """Get an example input configuration."""
    return CalculationInputs(
        leadscrew_lead=3.0,
        leadscrew_unit=LengthUnit.MM,
        shaft_count=3,
        change_gears=[20, 25, 30, 35, 40, 45, 50, 55, 60, 65, 70, 80],
        input_set_shared=True,
        desired_lead=1.25,
        desired_unit=LengthUnit.MM,
        module=1.0,
        module_unit=ModuleUnit.MODULE,
        addendum=1.2,
        spacer_size=12,
        input_adjacent_size=12,
    )


@app.post("/calculate", response_model=CalculationResult, tags=["Calculations"])
def calculate(inputs: CalculationInputs):
    """
    Calculate change gear trains.

    Returns the valid trains closest to the desired lead, best first.
    """
    return _calculate(inputs)


@app.get("/calculate", response_model=CalculationResult, tags=["Calculations"])
def calculate_from_link(request: Request):
    """
    Calculate change gear trains from bookmark URL parameters.

    Accepts the parameters produced by POST /link, e.g.
    ``?leadscrew-lead=3&leadscrew-mm=true&shaft-count=3&...``.
    """
    params = dict(request.query_params)
    if not params:
        raise HTTPException(status_code=400, detail="No calculation parameters given")
    try:
        inputs = CalculationInputs.from_query_params(params)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=e.errors(include_url=False, include_context=False))
    return _calculate(inputs)


@app.post("/link", response_model=LinkResponse, tags=["Calculations"])
async def link(inputs: CalculationInputs, request: Request):
    """Get the bookmark URL parameters for a calculation."""
    query = inputs.to_query_string()
    return LinkResponse(query_string=query, url=f"{request.base_url}calculate?{query}")
