"""One-off script for debugging a real virtual try-on call."""

import asyncio
from pathlib import Path

from config.settings import load_config
from modules.assets.image_asset import ImageAsset
from modules.pipelines.gemini_client import GeminiTryOnClient
from modules.services.session import TryOnSession
from modules.utils.logging import setup_logging


async def run() -> None:
    # 1. 准备真实配置与会话对象
    config = load_config()
    setup_logging(config)
    session = TryOnSession(
        GeminiTryOnClient(config),
        max_garments=config.max_garments,
        timeout=config.request_timeout,
    )

    # 2. 准备测试输入（请按需替换）
    person_path = Path("tests/assets/debug_person.png")
    garment_path = Path("tests/assets/debug_garment.png")
    for path in (person_path, garment_path):
        if not path.exists():
            raise FileNotFoundError(f"缺少测试图像: {path}")

    session.set_person_image(ImageAsset.from_path(person_path))
    session.add_garments([ImageAsset.from_path(garment_path)])
    session.reset_generation_state()
    session.set_fit("loose")
    session.set_background_edit("a quiet beach at sunset")

    # 3. 调用真实生成
    document = await session.generate(progress=lambda message: print("进度:", message))
    suggestions = await session.orchestrator.wait_for_suggestions()

    if document is None or document.base_image is None:
        print("没有生成图像，请检查日志。")
        return
    out_path = Path(f"debug_tryon_output.{document.base_image.extension}")
    out_path.write_bytes(document.base_image.data)
    print("图像已保存:", out_path.resolve())
    print("搭配建议:", suggestions)


if __name__ == "__main__":
    asyncio.run(run())
