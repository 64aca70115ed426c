# puyopu64_app.py
# Puyopu64 — Gradio UI (password translator between Puzzle Pop and Puyo Puyo 7 / Puyo Puyo!!)

import argparse
import logging

import gradio as gr
import puyopu64 as pp

logger = logging.getLogger(__name__)


CSS = """
<style>
#title { margin-bottom: 0.25rem; }
.small { opacity: 0.90; font-size: 0.92rem; }
</style>
"""

PLACEHOLDER_SOURCE = "元"
PLACEHOLDER_TARGET = "翻訳後"

ABOUT_MD = r"""
## About Puyopu64

**ぷよぷよパズルポップ** and **ぷよぷよ７ / ぷよぷよ！！** share the same field password format:
a list of 6-bit values ("sextets"), only written with different characters.

- **Puzzle Pop** uses ASCII letters, digits and symbols.
- **Puyo Puyo 7 / Puyo Puyo!!** uses hiragana and full-width capital letters.

The last sextet tells the format: **PLAIN** (0) packs two cells per sextet, **RLE** (2) stores
`(value, run length)` pairs. Passwords headed for Puyo Puyo 7 are always re-compressed the way
the game does it, so the game gets back exactly the password it would print itself.

**Tolerated input:** whitespace and line breaks are ignored, full-width / half-width and upper / lower
case are folded where the target alphabet has no ambiguity, and `〜` is read as `~`.

The rule is guessed from the field size: 78 cells = ノーマル, 84 = ぷよぷよSUN, 22 = でかぷよ, 190 = ちびぷよ.
"""


def _alphabet_md() -> str:
    rows = ["| Game | Alphabet |", "| --- | --- |"]
    for variant in pp.VARIANTS.values():
        rows.append(f"| {variant.title} | `{variant.alphabet}` |")
    return "\n".join(rows)


def do_preview(text_in: str):
    if not text_in.strip():
        return PLACEHOLDER_SOURCE, PLACEHOLDER_TARGET, ""
    try:
        p = pp.describe(text_in)
        return p.source, p.target, f"Rule: {p.rule.title}"
    except pp.Puyopu64Error:
        return PLACEHOLDER_SOURCE, PLACEHOLDER_TARGET, ""


def do_translate(text_in: str):
    try:
        out = pp.translate(text_in)
    except pp.Puyopu64Error as e:
        logger.info("Translation failed: %s", e)
        return "エラー:\n" + str(e), "Not translated."
    except Exception:
        logger.exception("Unexpected failure while translating")
        return "", "Error: internal failure (see log)."

    return out, "Translated."


def do_swap(text_in: str, text_out: str):
    return text_out, text_in, "Swapped."


def build_app():
    with gr.Blocks(title="Puyopu64 — Password Translator") as demo:
        gr.HTML(CSS)

        gr.Markdown("# Puyopu64 — ぷよぷよ パスワード翻訳", elem_id="title")
        gr.Markdown(
            "Paste a field password from **ぷよぷよパズルポップ** or **ぷよぷよ７ / ぷよぷよ！！** "
            "and get the same field for the other game.",
            elem_classes=["small"],
        )

        with gr.Tabs():
            with gr.TabItem("Translate"):
                text_in = gr.Textbox(label="Original password", lines=4)

                with gr.Row():
                    source = gr.Textbox(label="From", value=PLACEHOLDER_SOURCE, interactive=False)
                    target = gr.Textbox(label="To", value=PLACEHOLDER_TARGET, interactive=False)
                    rule = gr.Markdown("")

                with gr.Row():
                    btn_translate = gr.Button("Translate")
                    btn_swap = gr.Button("Swap ↔")

                text_out = gr.Textbox(label="Translated password", lines=4)
                status = gr.Markdown("Tip: spaces and line breaks in the input are ignored.")

                text_in.change(
                    do_preview,
                    inputs=[text_in],
                    outputs=[source, target, rule],
                )
                text_in.submit(
                    do_translate,
                    inputs=[text_in],
                    outputs=[text_out, status],
                )
                btn_translate.click(
                    do_translate,
                    inputs=[text_in],
                    outputs=[text_out, status],
                )
                btn_swap.click(
                    do_swap,
                    inputs=[text_in, text_out],
                    outputs=[text_in, text_out, status],
                )

            with gr.TabItem("About"):
                gr.Markdown(ABOUT_MD)
                gr.Markdown(_alphabet_md())

    return demo


def parse_args(argv=None):
    ap = argparse.ArgumentParser(description="Puyopu64 password translator (Gradio UI)")
    ap.add_argument("--host", default="127.0.0.1", help="Interface to bind")
    ap.add_argument("--port", type=int, default=7860, help="Port to listen on")
    ap.add_argument("--share", action="store_true", help="Create a public Gradio share link")
    ap.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    return ap.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    logging.basicConfig(level=args.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    app = build_app()
    app.launch(server_name=args.host, server_port=args.port, share=args.share)


if __name__ == "__main__":
    main()
