import logging
from flask import Flask, request, render_template_string, jsonify, redirect, url_for, session, current_app

import config
from audit_logger import init_audit, audited, record_change, diff_records
from document_store import StoreUnavailable, store_from_config
from error_logger import init_error_logging
from inventory_view import InventoryView, stock_label
from sales import SalesRecorder
from synchronizer import MedicineListSynchronizer
from validation import MedicineForm, ValidationError, draft_from_form
from models import Medicine

app = Flask(__name__)
app.secret_key = config.SECRET_KEY
app.config['DOCUMENT_STORE'] = store_from_config()
init_error_logging(app)
init_audit(app)

DB_ERROR = "Database connection failed. Please try again later."
STALE_RECORD = "The inventory changed since this page was loaded. Nothing was changed; please try again."


# Store handle for the current app (tests swap it through app.config)
def get_store():
    return current_app.config['DOCUMENT_STORE']
def load_medicines():
    meds = MedicineListSynchronizer(get_store())
    meds.load()
    return meds
def load_sales():
    recorder = SalesRecorder(get_store())
    recorder.load()
    return recorder
def get_nav_links():
    return """
    <p class="nav-links"><strong>Navigate:</strong>
        <a href="/">Dashboard</a> |
        <a href="/inventory">Inventory</a> |
        <a href="/add-medicine">Add Medicine</a> |
        <a href="/sales">Sales</a>
    </p>
    """
# CSS for all templates
CSS_STYLE = """
<style>
    body {
        font-family: Arial, sans-serif;
        max-width: 1200px;
        margin: 0 auto;
        padding: 20px;
        background-color: #f8f9fa;
        color: #333;
    }
    h1 {
        color: #0056b3;
        text-align: center;
        margin-bottom: 20px;
    }
    h2 {
        color: #343a40;
        margin-top: 30px;
    }
    .nav-links {
        text-align: center;
        margin-bottom: 20px;
        font-size: 16px;
        position: sticky;
        top: 0;
        background-color: #f8f9fa;
        z-index: 100;
        padding: 10px 0;
        box-shadow: 0 2px 4px rgba(0,0,0,0.1);
        border-bottom: 1px solid #dee2e6;
    }
    .nav-links a {
        color: #0056b3;
        text-decoration: none;
        margin: 0 10px;
        font-weight: bold;
    }
    form {
        background-color: #fff;
        padding: 20px;
        border-radius: 8px;
        box-shadow: 0 2px 4px rgba(0,0,0,0.1);
        max-width: 900px;
        margin: 0 auto 20px;
    }
    .common-section {
        display: grid;
        grid-template-columns: repeat(3, 1fr);
        gap: 15px;
        margin-bottom: 20px;
    }
    label {
        display: block;
        font-weight: bold;
        margin-bottom: 5px;
    }
    input, textarea {
        width: 100%;
        padding: 8px;
        border: 1px solid #ced4da;
        border-radius: 4px;
        box-sizing: border-box;
    }
    textarea {
        height: 100px;
        resize: none;
    }
    input[type="submit"], button {
        background-color: #0056b3;
        color: #fff;
        border: none;
        padding: 10px 18px;
        border-radius: 4px;
        cursor: pointer;
        width: auto;
    }
    button.delete-btn {
        background-color: #dc3545;
    }
    table {
        width: 100%;
        border-collapse: collapse;
        background-color: #fff;
        box-shadow: 0 2px 4px rgba(0,0,0,0.1);
        margin-top: 20px;
    }
    table th, table td {
        padding: 12px;
        text-align: left;
        border: 1px solid #dee2e6;
    }
    table th {
        background-color: #0056b3;
        color: #fff;
        font-weight: bold;
    }
    table tr:nth-child(even) {
        background-color: #f8f9fa;
    }
    .message {
        padding: 10px;
        margin-bottom: 20px;
        border-radius: 4px;
        text-align: center;
        font-weight: bold;
    }
    .message.success {
        background-color: #d4edda;
        color: #155724;
    }
    .message.error {
        background-color: #f8d7da;
        color: #721c24;
    }
    .summary {
        display: grid;
        grid-template-columns: repeat(4, 1fr);
        gap: 15px;
    }
    .summary div {
        background-color: #fff;
        padding: 15px;
        border-radius: 8px;
        box-shadow: 0 2px 4px rgba(0,0,0,0.1);
        text-align: center;
    }
    .summary strong {
        display: block;
        font-size: 24px;
        color: #0056b3;
    }
    @media (max-width: 600px) {
        .common-section, .summary {
            grid-template-columns: 1fr;
        }
    }
</style>
"""
MESSAGE_BLOCK = """
{% if message %}
    <p class="message {% if 'successfully' in message|lower %}success{% else %}error{% endif %}">{{ message }}</p>
{% endif %}
"""
DASHBOARD_TEMPLATE = CSS_STYLE + """
<h1>Pharmacy Dashboard</h1>
{{ nav_links|safe }}
""" + MESSAGE_BLOCK + """
<div class="summary">
    <div>Medicines<strong>{{ medicine_count }}</strong></div>
    <div>Units in Stock<strong>{{ units_in_stock }}</strong></div>
    <div>Orders<strong>{{ summary.order_count }}</strong></div>
    <div>Revenue<strong>${{ "%.2f"|format(summary.total_revenue) }}</strong></div>
</div>
"""
INVENTORY_TEMPLATE = CSS_STYLE + """
<h1>Inventory</h1>
{{ nav_links|safe }}
""" + MESSAGE_BLOCK + """
<form method="GET" action="{{ url_for('inventory') }}">
    <label>Search Medicine:</label>
    <input name="search" type="text" value="{{ search or '' }}" placeholder="Filter by medicine name">
    <input type="submit" value="Search">
    {% if filtered %}<a href="{{ url_for('inventory') }}">Show all</a>{% endif %}
</form>
<h2>List of Medicines</h2>
<table>
    <thead>
        <tr>
            <th>Medicine Name</th>
            <th>Medicine ID</th>
            <th>Quantity</th>
            <th>How to Use</th>
            <th>Side Effects</th>
            <th>Actions</th>
        </tr>
    </thead>
    <tbody>
    {% for index, med in entries %}
        <tr>
            <td>{{ med.name }}</td>
            <td>{{ med.id }}</td>
            <td>{{ med.quantity }}</td>
            <td>{{ med.usage or '' }}</td>
            <td>{{ med.side_effects or '' }}</td>
            <td>
                <a href="{{ url_for('edit_medicine', index=index) }}"><button type="button">Edit</button></a>
                <form method="POST" action="{{ url_for('delete_medicine') }}" style="display: inline; padding: 0; box-shadow: none;">
                    <input type="hidden" name="index" value="{{ index }}">
                    <input type="hidden" name="med_id" value="{{ med.id }}">
                    <input type="hidden" name="search" value="{{ search or '' }}">
                    <button type="submit" class="delete-btn" onclick="return confirm('Are you sure you want to delete {{ med.name }}?');">Delete</button>
                </form>
            </td>
        </tr>
    {% else %}
        <tr><td colspan="6">No medicines matching the criteria.</td></tr>
    {% endfor %}
    </tbody>
</table>
"""
MEDICINE_FIELDS = """
    <div>
        <label>Medicine Name*</label>
        <input name="name" autocomplete="off" value="{{ draft.name }}">
    </div>
    <div class="common-section">
        <div>
            <label>Quantity in Number*</label>
            <input name="quantity" autocomplete="off" value="{{ draft.quantity }}">
        </div>
        <div>
            <label>Medicine ID*</label>
            <input name="id" autocomplete="off" value="{{ draft.id }}">
        </div>
    </div>
    <div>
        <label>How to Use (optional)</label>
        <textarea name="usage">{{ draft.usage or '' }}</textarea>
    </div>
    <div>
        <label>Side Effects (optional)</label>
        <textarea name="sideEffects">{{ draft.side_effects or '' }}</textarea>
    </div>
"""
ADD_MED_TEMPLATE = CSS_STYLE + """
<h1>Add New Medicine</h1>
{{ nav_links|safe }}
""" + MESSAGE_BLOCK + """
<p>*All fields are mandatory, except mentioned as (optional).</p>
<form method="POST" action="{{ url_for('add_medicine') }}">
""" + MEDICINE_FIELDS + """
    <input type="submit" value="Add Medicine">
</form>
"""
EDIT_MED_TEMPLATE = CSS_STYLE + """
<h1>Edit Medicine</h1>
{{ nav_links|safe }}
""" + MESSAGE_BLOCK + """
{% if draft %}
<form method="POST" action="{{ url_for('edit_medicine', index=index) }}">
    <input type="hidden" name="original_id" value="{{ original_id or '' }}">
""" + MEDICINE_FIELDS + """
    <input type="submit" value="Update Medicine">
    <a href="{{ url_for('inventory') }}"><button type="button">Cancel</button></a>
</form>
{% endif %}
"""
SALES_TEMPLATE = CSS_STYLE + """
<h1>Sales</h1>
{{ nav_links|safe }}
""" + MESSAGE_BLOCK + """
<div class="summary">
    <div>Orders<strong>{{ summary.order_count }}</strong></div>
    <div>Units Sold<strong>{{ summary.units_sold }}</strong></div>
    <div>Revenue<strong>${{ "%.2f"|format(summary.total_revenue) }}</strong></div>
    <div>Medicines Sold<strong>{{ summary.revenue_by_medicine|length }}</strong></div>
</div>
<h2>New Order</h2>
<form method="POST" action="{{ url_for('sales') }}">
    <div class="common-section">
        <div>
            <label>Medicine:</label>
            <input name="medicine_name" list="med_suggestions" value="{{ form.medicine_name or '' }}">
        </div>
        <div>
            <label>Quantity:</label>
            <input name="quantity" value="{{ form.quantity or '' }}">
        </div>
        <div>
            <label>Price per Unit:</label>
            <input name="unit_price" value="{{ form.unit_price or '' }}">
        </div>
    </div>
    <datalist id="med_suggestions">
    {% for name in medicine_names %}<option value="{{ name }}">{% endfor %}
    </datalist>
    <input type="submit" value="Submit Order">
</form>
<h2>Orders</h2>
<table>
    <thead>
        <tr>
            <th>Order ID</th>
            <th>Date</th>
            <th>Medicine</th>
            <th>Quantity</th>
            <th>Unit Price</th>
            <th>Total</th>
        </tr>
    </thead>
    <tbody>
    {% for order in orders %}
        <tr>
            <td>{{ order.order_id }}</td>
            <td>{{ order.order_date or '' }}</td>
            <td>{{ order.medicine_name }}</td>
            <td>{{ order.quantity }}</td>
            <td>${{ "%.2f"|format(order.unit_price) }}</td>
            <td>${{ "%.2f"|format(order.total_revenue) }}</td>
        </tr>
    {% else %}
        <tr><td colspan="6">No orders recorded yet.</td></tr>
    {% endfor %}
    </tbody>
</table>
"""
EMPTY_SUMMARY = {'order_count': 0, 'units_sold': 0, 'total_revenue': 0.0, 'revenue_by_medicine': {}}
# Routes
@app.route('/', methods=['GET'])
def home():
    message = session.pop('message', None)
    try:
        meds = load_medicines()
        recorder = load_sales()
    except StoreUnavailable:
        return render_template_string(DASHBOARD_TEMPLATE, nav_links=get_nav_links(), message=DB_ERROR, medicine_count=0, units_in_stock='0', summary=EMPTY_SUMMARY), 500
    return render_template_string(
        DASHBOARD_TEMPLATE,
        nav_links=get_nav_links(),
        message=message,
        medicine_count=len(meds),
        units_in_stock=stock_label(meds.items),
        summary=recorder.summary()
    )
@app.route('/inventory', methods=['GET'])
def inventory():
    message = session.pop('message', None)
    search = request.args.get('search', '')
    try:
        view = InventoryView(load_medicines())
    except StoreUnavailable:
        return render_template_string(INVENTORY_TEMPLATE, nav_links=get_nav_links(), message=DB_ERROR, entries=[], search=search), 500
    view.search(search)
    return render_template_string(INVENTORY_TEMPLATE, nav_links=get_nav_links(), message=message, entries=view.entries(), search=view.query, filtered=view.is_filtered)
@app.route('/add-medicine', methods=['GET', 'POST'])
@audited
def add_medicine():
    if request.method != 'POST':
        return render_template_string(ADD_MED_TEMPLATE, nav_links=get_nav_links(), message=None, draft=Medicine())
    draft = draft_from_form(request.form)
    try:
        form = MedicineForm(load_medicines())
        record = form.submit(draft)
    except StoreUnavailable:
        return render_template_string(ADD_MED_TEMPLATE, nav_links=get_nav_links(), message=DB_ERROR, draft=draft), 500
    if record is None:
        return render_template_string(ADD_MED_TEMPLATE, nav_links=get_nav_links(), message=form.error_message if form.show_error else None, draft=form.draft), 400
    record_change('CREATE', 'medicine', record.id, record.to_dict())
    return render_template_string(ADD_MED_TEMPLATE, nav_links=get_nav_links(), message='Medicine added successfully!', draft=form.draft)
@app.route('/edit-medicine/<int:index>', methods=['GET', 'POST'])
@audited
def edit_medicine(index):
    try:
        meds = load_medicines()
    except StoreUnavailable:
        return render_template_string(EDIT_MED_TEMPLATE, nav_links=get_nav_links(), message=DB_ERROR, draft=None, index=index), 500
    if index >= len(meds):
        return render_template_string(EDIT_MED_TEMPLATE, nav_links=get_nav_links(), message='Medicine not found.', draft=None, index=index), 404
    current = meds.items[index]
    if request.method != 'POST':
        return render_template_string(EDIT_MED_TEMPLATE, nav_links=get_nav_links(), message=None, draft=current, index=index, original_id=current.id)
    original_id = request.form.get('original_id')
    updated = draft_from_form(request.form)
    if original_id is not None and original_id != current.id:
        return render_template_string(EDIT_MED_TEMPLATE, nav_links=get_nav_links(), message=STALE_RECORD, draft=None, index=index), 409
    try:
        InventoryView(meds).edit(current, updated)
    except ValidationError as e:
        return render_template_string(EDIT_MED_TEMPLATE, nav_links=get_nav_links(), message=e.message, draft=updated, index=index, original_id=current.id), 400
    except StoreUnavailable:
        return render_template_string(EDIT_MED_TEMPLATE, nav_links=get_nav_links(), message=DB_ERROR, draft=updated, index=index, original_id=current.id), 500
    record_change('UPDATE', 'medicine', updated.id, diff_records(current, updated))
    return render_template_string(EDIT_MED_TEMPLATE, nav_links=get_nav_links(), message='Medicine updated successfully!', draft=updated, index=index, original_id=updated.id)
@app.route('/delete-medicine', methods=['POST'])
@audited
def delete_medicine():
    index = request.form.get('index', type=int)
    search = request.form.get('search') or None
    if index is None:
        session['message'] = 'No medicine specified.'
        return redirect(url_for('inventory', search=search))
    try:
        meds = load_medicines()
        if not 0 <= index < len(meds):
            session['message'] = 'Medicine not found.'
            return redirect(url_for('inventory', search=search))
        removed = meds.items[index]
        med_id = request.form.get('med_id')
        if med_id is not None and med_id != removed.id:
            session['message'] = STALE_RECORD
            return redirect(url_for('inventory', search=search))
        InventoryView(meds).delete(removed)
        session['message'] = f'Medicine "{removed.name}" deleted successfully.'
        record_change('DELETE', 'medicine', removed.id, {'snapshot': removed.to_dict()})
    except StoreUnavailable:
        session['message'] = DB_ERROR
    # Preserve the search the user had
    return redirect(url_for('inventory', search=search))
@app.route('/sales', methods=['GET', 'POST'])
@audited
def sales():
    message = None
    status = 200
    try:
        recorder = load_sales()
        medicine_names = sorted({m.name for m in load_medicines().items})
        if request.method == 'POST':
            try:
                order = recorder.record(
                    request.form.get('medicine_name'),
                    request.form.get('quantity', ''),
                    request.form.get('unit_price', '')
                )
                record_change('CREATE', 'order', order.order_id, order.to_dict())
                message = f'Order #{order.order_id} recorded successfully.'
            except ValidationError as e:
                message = e.message
                status = 400
    except StoreUnavailable:
        return render_template_string(SALES_TEMPLATE, nav_links=get_nav_links(), message=DB_ERROR, summary=EMPTY_SUMMARY, orders=[], medicine_names=[], form={}), 500
    form = request.form if status != 200 else {}
    return render_template_string(SALES_TEMPLATE, nav_links=get_nav_links(), message=message, summary=recorder.summary(), orders=recorder.orders, medicine_names=medicine_names, form=form), status
@app.route('/api/medicines', methods=['GET'])
def api_medicines():
    try:
        view = InventoryView(load_medicines())
    except StoreUnavailable:
        return jsonify({'error': DB_ERROR}), 500
    return jsonify([m.to_dict() for m in view.search(request.args.get('search', ''))])
@app.route('/api/sales/summary', methods=['GET'])
def api_sales_summary():
    try:
        recorder = load_sales()
    except StoreUnavailable:
        return jsonify({'error': DB_ERROR}), 500
    return jsonify(recorder.summary())
if __name__ == '__main__':
    logging.basicConfig(level=logging.INFO)
    app.run(host='0.0.0.0', port=config.PORT)
