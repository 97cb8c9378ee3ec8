# -*- coding: utf-8 -*-
"""Gradio shell for the trip import wizard.

Renders the current step, the title and the progress indicator, and
drives the wizard with Next / Back / Close buttons. Steps that wait on
an external operation advance on their own; the timer refreshes the
view so those transitions show up.
"""

import json
from typing import Any, Dict, List, Tuple

import gradio as gr

from trip_import.container import get_container
from trip_import.domain.models import ImportMethod, StepId
from trip_import.monitoring import configure_logging
from trip_import.services import ImportWizardFactory, StepContext, StepHandlerRegistry

configure_logging()

# ============================ WIZARD ============================
IMPORTED: List[Dict[str, Any]] = []
METHOD_CHOICES: List[str] = [method.value for method in ImportMethod]

registry = StepHandlerRegistry()


@registry.handler(*StepId)
def describe_step(context: StepContext) -> str:
    lines = [f"### `{context.step.value}`"]
    if context.data:
        payload = json.dumps(dict(context.data), indent=2, default=str)
        lines.append(f"```json\n{payload}\n```")
    return "\n\n".join(lines)


wizard = get_container().resolve(ImportWizardFactory).create(
    on_complete=IMPORTED.append,
    handlers=registry,
)


# ============================ HANDLERS ============================
def _imported_markdown() -> str:
    if not IMPORTED:
        return "_No trip imported yet._"
    return "\n".join(
        f"- {i}. {json.dumps(data, default=str)}" for i, data in enumerate(IMPORTED, 1)
    )


def _render(notice: str = "") -> Tuple[str, str, str]:
    if not wizard.visible:
        return "## Import Trip\n\n_Wizard closed._", notice, _imported_markdown()

    rendered = wizard.render()
    view = rendered.view
    header = f"## {view.title}"
    if view.show_progress:
        header += f"\n\nStep {view.ordinal} / {view.total_steps}"
    if view.failure is not None:
        header += f"\n\n⚠️ {view.failure.message} (Next retries)"
    body = rendered.output if not notice else f"{rendered.output}\n\n{notice}"
    return header, body, _imported_markdown()


async def ui_open() -> Tuple[str, str, str]:
    wizard.open()
    return _render()


async def ui_next(method: str, payload_text: str) -> Tuple[str, str, str]:
    try:
        payload = json.loads(payload_text) if payload_text.strip() else {}
    except json.JSONDecodeError as e:
        return _render(f"❌ Invalid JSON payload: {e}")
    if not isinstance(payload, dict):
        return _render("❌ Payload must be a JSON object")

    controller = wizard.controller
    if controller.current_step == StepId.METHOD_SELECTION:
        controller.advance(payload, method or None)
    else:
        controller.advance(payload)
    return _render()


async def ui_back() -> Tuple[str, str, str]:
    wizard.controller.rewind()
    return _render()


async def ui_close() -> Tuple[str, str, str]:
    wizard.close()
    return _render()


async def ui_refresh() -> Tuple[str, str, str]:
    return _render()


# ============================ UI ============================
with gr.Blocks(title="Import Trip") as app:
    gr.Markdown("# 🧳 Import Trip")

    header_md = gr.Markdown()
    step_md = gr.Markdown()

    with gr.Row():
        method_dd = gr.Dropdown(METHOD_CHOICES, value=METHOD_CHOICES[0], label="📥 Method")
        payload_tb = gr.Textbox(
            label="🧾 Step data (JSON)",
            placeholder='{"email_provider": "gmail"}',
            lines=3,
        )

    with gr.Row():
        btn_open = gr.Button("🚀 Open")
        btn_back = gr.Button("⬅️ Back")
        btn_next = gr.Button("➡️ Next")
        btn_close = gr.Button("✕ Close")

    gr.Markdown("## 📦 Imported")
    imported_md = gr.Markdown(_imported_markdown())

    outputs = [header_md, step_md, imported_md]
    btn_open.click(ui_open, outputs=outputs)
    btn_next.click(ui_next, inputs=[method_dd, payload_tb], outputs=outputs)
    btn_back.click(ui_back, outputs=outputs)
    btn_close.click(ui_close, outputs=outputs)

    timer = gr.Timer(1.0)
    timer.tick(ui_refresh, outputs=outputs)


if __name__ == "__main__":
    app.launch()
