"""
Logistics Cart Client - Streamlit Frontend Entry Point.

Single page with the cart key panel, product lookup, movement search and the
shared cart. All state lives in this browser session's LogisticsClient
(utils/session.py); this file only renders it and forwards user intents.

The cart section runs as a fragment that re-executes every second, draining
the push channel so broadcasts from other tabs/devices show up without a
full rerun.
"""

import sys
from pathlib import Path

# Ensure the streamlit_app directory and the project root are importable
# regardless of how the app is run
streamlit_app_dir = Path(__file__).parent
if str(streamlit_app_dir) not in sys.path:
    sys.path.insert(0, str(streamlit_app_dir))
project_root = streamlit_app_dir.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

# Import config early to load .env before anything reads the environment
import logistica.config  # noqa: F401

import streamlit as st

from logistica.api_client import get_backend_url
from ui.feedback import render_connection_status, render_notification, show_empty_state, show_error
from utils.session import get_or_create_client

MOVEMENT_COLUMNS = [
    ("id", "#"),
    ("material", "Material"),
    ("texto_breve_material", "Description"),
    ("descricao_fornecedor_principal", "Supplier"),
    ("quantidade", "Qty"),
    ("tipo_movimento", "Type"),
    ("data_entrada", "Entry"),
]

st.set_page_config(page_title="Logistics", page_icon="📦", layout="wide")

client = get_or_create_client()
reconciler = client.reconciler


def _display(value) -> str:
    return "—" if value is None or value == "" else str(value)


st.title("📦 Logistics")
render_connection_status(client.connected)

# Cart key
st.subheader("🔑 Cart key")
key_col, apply_col, new_col, load_col = st.columns([3, 1, 1, 1])
with key_col:
    typed_key = st.text_input(
        "Current key",
        value=client.session_key,
        placeholder="e.g. a1b2c3d4",
        key=f"key_input_{client.session_key}",
    )
with apply_col:
    if st.button("Apply", use_container_width=True, type="primary"):
        reconciler.apply_key(typed_key)
with new_col:
    if st.button("Generate new", use_container_width=True):
        reconciler.regenerate_key()
with load_col:
    if st.button("Load cart", use_container_width=True):
        reconciler.load_cart()
st.caption("Active key (share it to open the same cart elsewhere):")
st.code(client.session_key, language=None)

st.divider()

# Product lookup
st.subheader("🔍 Look up product (material or EAN)")
lookup_col, lookup_btn_col = st.columns([4, 1])
with lookup_col:
    lookup_value = st.text_input("Material or EAN", placeholder="e.g. 8517681 or 7891234567890")
with lookup_btn_col:
    if st.button("Search", key="lookup_btn", use_container_width=True):
        client.product.lookup(lookup_value)

if client.product.error:
    show_error(client.product.error)
produto = client.product.produto
if produto is not None:
    st.markdown(f"**Material:** {_display(produto.cod_material)}")
    st.markdown(f"**EAN:** {_display(produto.ean)}")
    st.markdown(f"**Description:** {_display(produto.texto_breve_material)}")
    st.markdown(f"**Supplier:** {_display(produto.descricao_fornecedor_principal)}")

st.divider()

# Movement search
st.subheader("📑 Movements")
id_col, ean_col, material_col, search_col = st.columns(4)
with id_col:
    filter_id = st.text_input("ID", placeholder="e.g. 12")
with ean_col:
    filter_ean = st.text_input("EAN", placeholder="e.g. 7891234567890")
with material_col:
    filter_material = st.text_input("Material", placeholder="e.g. 8517681")
with search_col:
    if st.button("Search", key="movements_btn", use_container_width=True):
        client.movements.run(id=filter_id, ean=filter_ean, material=filter_material)

if not client.movements.results:
    show_empty_state("No movements loaded.")
else:
    header = st.columns(len(MOVEMENT_COLUMNS) + 1)
    for col, (_, label) in zip(header, MOVEMENT_COLUMNS):
        col.markdown(f"**{label}**")
    for idx, movement in enumerate(client.movements.results):
        row = st.columns(len(MOVEMENT_COLUMNS) + 1)
        for col, (field_name, _) in zip(row, MOVEMENT_COLUMNS):
            col.write(_display(getattr(movement, field_name)))
        if row[-1].button("Add", key=f"add_{movement.id}_{idx}", disabled=not movement.id):
            reconciler.request_add(movement.id)

st.divider()


@st.fragment(run_every=1.0)
def cart_section() -> None:
    reconciler.pump()
    cart = reconciler.cart
    st.subheader(f"🛒 Cart ({len(cart)})")
    if not cart:
        show_empty_state("Your cart is empty.")
    else:
        st.dataframe(
            [{label: item.model_dump().get(name) for name, label in MOVEMENT_COLUMNS[1:]} for item in cart],
            use_container_width=True,
            hide_index=True,
        )
    render_notification(client.notifications)


cart_section()

st.caption(f"Connected to: {get_backend_url()}")
