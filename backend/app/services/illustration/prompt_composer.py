"""
插画提示词组装
按固定顺序拼接风格、角色一致性、延续、融合等子句，输出确定性的提示词
"""

from typing import Dict

from app.services.illustration.models import IllustrationRequest, IllustrationStyle, PromptVariant

STANDARD_PREAMBLE = "Create a high-quality children's book illustration. "
ADVANCED_PREAMBLE = "Create a high-quality children's book illustration with advanced features. "
BATCH_PREAMBLE = "Create a high-quality children's book illustration for page {page_number}. "

STYLE_CLAUSES: Dict[IllustrationStyle, str] = {
    IllustrationStyle.REALISTIC: "Style: photorealistic, warm and inviting, suitable for ages 3-12. ",
    IllustrationStyle.CARTOON: "Style: colorful cartoon illustration, friendly and engaging, suitable for ages 3-12. ",
    IllustrationStyle.WATERCOLOR: "Style: soft watercolor painting, artistic and dreamy, suitable for ages 3-12. ",
    IllustrationStyle.SKETCH: "Style: detailed pencil sketch with light coloring, educational and clear, suitable for ages 3-12. ",
}

CHARACTER_CLAUSE = "Character consistency: Maintain the same character appearance as described: {description}. "
GENERIC_CONSISTENCY_CLAUSE = "Character consistency: Maintain consistent character appearance throughout the story. "
EDIT_CLAUSE = (
    "This is an edit/continuation of a previous scene. "
    "Maintain visual continuity and character consistency. "
)
STORY_CONTINUATION_CLAUSE = "This is a continuation of the story. Maintain visual continuity with previous scenes. "
FUSION_CLAUSE = "Use image fusion techniques to blend multiple story elements seamlessly. "
CLOSING_CLAUSE = (
    "Lighting: soft, natural lighting. "
    "Colors: vibrant but not overwhelming. "
    "Composition: clean, uncluttered, focus on the main subject. "
)


def _preamble(request: IllustrationRequest) -> str:
    if request.variant == PromptVariant.ADVANCED:
        return ADVANCED_PREAMBLE
    if request.variant == PromptVariant.BATCH:
        return BATCH_PREAMBLE.format(page_number=request.page_number or 1)
    return STANDARD_PREAMBLE


def compose_prompt(request: IllustrationRequest) -> str:
    """
    组装插画提示词

    Args:
        request: 插画请求

    Returns:
        str: 以场景描述原文结尾的提示词
    """
    prompt = _preamble(request)
    prompt += STYLE_CLAUSES.get(request.style, STYLE_CLAUSES[IllustrationStyle.REALISTIC])

    # 有角色描述时不再追加通用一致性子句
    if request.character_description:
        prompt += CHARACTER_CLAUSE.format(description=request.character_description)
    elif request.consistency_mode:
        prompt += GENERIC_CONSISTENCY_CLAUSE

    if request.edit_mode and request.previous_image_url:
        prompt += EDIT_CLAUSE

    if request.variant == PromptVariant.BATCH and (request.page_number or 1) > 1:
        prompt += STORY_CONTINUATION_CLAUSE

    if request.fusion_mode:
        prompt += FUSION_CLAUSE

    prompt += CLOSING_CLAUSE
    prompt += request.scene_prompt

    return prompt


def append_page_marker(prompt: str, page_number: int, page_count: int) -> str:
    """多页高级生成时在提示词末尾标注页码"""
    return f"{prompt} This is page {page_number} of {page_count}. "
