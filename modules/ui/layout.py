"""Gradio layout for the try-on studio."""

from __future__ import annotations

from typing import Any, Optional, Sequence

try:
    import gradio as gr
except ImportError:  # pragma: no cover
    gr = None  # type: ignore

from config.settings import AppConfig
from modules.prompts.options import BackgroundOption, FitOption, PoseOption
from modules.ui.callbacks import build_callbacks

WELCOME_TEXT = (
    "### 欢迎使用 AI 虚拟试衣\n"
    "1. 上传一张你的照片。\n"
    "2. 添加最多 {max_garments} 张服装图片，或直接描述想要的修改。\n"
    "3. 选择姿势、版型和背景，然后点击 **开始试穿**。\n"
    "每次生成的结果都会成为下一次编辑的起点，可用撤销/重做在结果之间切换。"
)

# 远程调用期间不缓存重复点击，由会话的 busy 标志拒绝并发请求
REMOTE_EVENT_OPTIONS = {"trigger_mode": "once", "concurrency_limit": None}


def _choices(options: Sequence[Any]) -> list[str]:
    return [option.value for option in options]


def build_app(config: AppConfig, client: Optional[Any] = None) -> Any:
    """Compose and return the Gradio application."""
    if gr is None:
        raise RuntimeError("Gradio 未安装，请先执行依赖安装。")

    callbacks_map = build_callbacks(config, client=client)

    with gr.Blocks(title="AI Try-On Studio") as demo:
        gr.Markdown("## AI 虚拟试衣工作室")

        with gr.Column(visible=not callbacks_map["session"].welcome_seen) as welcome_box:
            gr.Markdown(WELCOME_TEXT.format(max_garments=config.max_garments))
            welcome_btn = gr.Button("开始使用")

        with gr.Row():
            with gr.Column():
                # 输入：人物照片与服装
                with gr.Row():
                    person_image = gr.Image(label="你的照片", type="filepath")
                    with gr.Column():
                        garment_files = gr.File(
                            label="服装图片",
                            file_count="multiple",
                            file_types=["image"],
                            type="filepath",
                        )
                        garment_gallery = gr.Gallery(label="已添加的服装", columns=2, height=240)
                        with gr.Row():
                            remove_index = gr.Number(label="移除第几件（从 1 开始）", value=1, precision=0, minimum=1)
                            remove_btn = gr.Button("移除")

                # 选项
                pose = gr.Radio(label="姿势", choices=_choices(PoseOption), value=PoseOption.ORIGINAL.value)
                custom_pose = gr.Textbox(label="自定义姿势", placeholder="例如：双手插兜，看向左侧")
                fit = gr.Radio(label="版型", choices=_choices(FitOption), value=FitOption.REGULAR.value)
                background = gr.Radio(
                    label="背景来源",
                    choices=_choices(BackgroundOption),
                    value=BackgroundOption.CUSTOM.value,
                )
                background_edit = gr.Textbox(label="新背景", placeholder="例如：阳光明媚的巴黎街道")
                custom_edit = gr.Textbox(label="自定义修改", lines=3, placeholder="描述其他想要的修改")
                suggestions = gr.Markdown()
                with gr.Row():
                    suggestion_text = gr.Textbox(label="采用搭配建议", scale=3)
                    suggestion_btn = gr.Button("应用", scale=1)

                with gr.Row():
                    start_over_btn = gr.Button("重新开始")
                    generate_btn = gr.Button("开始试穿", variant="primary")

            with gr.Column():
                result_image = gr.Image(label="生成结果", type="pil")
                with gr.Row():
                    undo_btn = gr.Button("撤销")
                    redo_btn = gr.Button("重做")
                    enhance_btn = gr.Button("画质增强")
                status = gr.Markdown("请先上传你的照片。")

        welcome_btn.click(
            fn=lambda: gr.update(visible=callbacks_map["on_dismiss_welcome"]()),
            outputs=[welcome_box],
        )

        # 更换人物或重新开始会重置全部选项，界面需同步显示
        reset_outputs = [
            person_image,
            garment_files,
            garment_gallery,
            pose,
            custom_pose,
            fit,
            background,
            result_image,
            suggestions,
            custom_edit,
            background_edit,
            status,
        ]
        for event in (person_image.upload, person_image.clear):
            event(
                fn=callbacks_map["on_upload_person"],
                inputs=[person_image],
                outputs=reset_outputs,
            )
        start_over_btn.click(fn=callbacks_map["on_start_over"], outputs=reset_outputs)

        garment_outputs = [
            garment_files,
            garment_gallery,
            background,
            result_image,
            suggestions,
            custom_edit,
            background_edit,
            status,
        ]
        garment_files.upload(
            fn=callbacks_map["on_add_garments"],
            inputs=[garment_files],
            outputs=garment_outputs,
        )
        remove_btn.click(
            fn=callbacks_map["on_remove_garment"],
            inputs=[remove_index],
            outputs=garment_outputs,
        )

        option_inputs = [pose, custom_pose, fit, background]
        for component in option_inputs:
            component.change(fn=callbacks_map["on_change_options"], inputs=option_inputs, outputs=[status])

        generate_btn.click(
            fn=callbacks_map["on_generate"],
            inputs=[custom_edit, background_edit],
            outputs=[result_image, status, suggestions, custom_edit, background_edit],
            **REMOTE_EVENT_OPTIONS,
        )
        enhance_btn.click(
            fn=callbacks_map["on_enhance"],
            outputs=[result_image, status, suggestions],
            **REMOTE_EVENT_OPTIONS,
        )
        undo_btn.click(
            fn=callbacks_map["on_undo"],
            outputs=[result_image, custom_edit, background_edit, status],
        )
        redo_btn.click(
            fn=callbacks_map["on_redo"],
            outputs=[result_image, custom_edit, background_edit, status],
        )
        suggestion_btn.click(
            fn=callbacks_map["on_apply_suggestion"],
            inputs=[suggestion_text],
            outputs=[custom_edit],
        )

    return demo
