"""
重阳节场景的提示词构建
"""

from typing import Optional

# 老照片修复未提供提示词时使用
PHOTO_RESTORE_PROMPT = (
    "请对输入的老照片进行修复，保持人物外观真实自然，修正刮痕、噪点和模糊，"
    "还原为彩色光影，并且变成清晰的图像，犹如索尼相机拍摄，高色彩饱和度。"
)

POEM_BASE_STYLE = "中国风古典画，重阳节主题，诗情画意，细腻笔触，高品质"
POEM_FESTIVAL_ELEMENTS = "金黄菊花，秋天山峰，古典建筑，茱萸，温暖色调"


def build_photo_restore_prompt(prompt: Optional[str] = None) -> str:
    """用户提示词为空时使用默认修复提示词"""
    if prompt and prompt.strip():
        return prompt.strip()
    return PHOTO_RESTORE_PROMPT


def build_poem_image_prompt(keywords: str, title: Optional[str] = None, content: Optional[str] = None) -> str:
    """
    根据诗词关键词构建配图提示词

    先加标题再加内容，二者都存在时内容在最前面。
    """
    prompt = f"{keywords.strip()}，{POEM_FESTIVAL_ELEMENTS}，{POEM_BASE_STYLE}，水墨画风格，意境深远，艺术感强"
    if title:
        prompt = f"标题：{title.strip()}，{prompt}"
    if content:
        prompt = f"内容：{content.strip()}，{prompt}"
    return prompt
