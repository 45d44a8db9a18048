"""
提示词组装单元测试
遵循项目测试规范：快速执行，无外部依赖
"""

import pytest

from app.services.illustration.models import IllustrationRequest, IllustrationStyle, PromptVariant
from app.services.illustration.prompt_composer import (
    ADVANCED_PREAMBLE,
    CHARACTER_CLAUSE,
    CLOSING_CLAUSE,
    EDIT_CLAUSE,
    FUSION_CLAUSE,
    GENERIC_CONSISTENCY_CLAUSE,
    STANDARD_PREAMBLE,
    STORY_CONTINUATION_CLAUSE,
    STYLE_CLAUSES,
    append_page_marker,
    compose_prompt,
)

SCENE = "A child waves at a lighthouse"


@pytest.mark.unit
@pytest.mark.illustration
class TestComposePrompt:
    """compose_prompt 单元测试类"""

    @pytest.mark.parametrize("style, fragment", [
        (IllustrationStyle.REALISTIC, "photorealistic, warm and inviting"),
        (IllustrationStyle.CARTOON, "colorful cartoon illustration"),
        (IllustrationStyle.WATERCOLOR, "soft watercolor painting"),
        (IllustrationStyle.SKETCH, "detailed pencil sketch with light coloring"),
    ])
    def test_style_fragment(self, style, fragment):
        """测试每种风格都包含对应的风格描述"""
        prompt = compose_prompt(IllustrationRequest(scene_prompt=SCENE, style=style))
        assert fragment in prompt
        assert STYLE_CLAUSES[style] in prompt

    def test_default_style_is_realistic(self):
        """测试未指定风格时使用写实风格"""
        prompt = compose_prompt(IllustrationRequest(scene_prompt=SCENE))
        assert STYLE_CLAUSES[IllustrationStyle.REALISTIC] in prompt

    def test_unknown_style_falls_back_to_realistic(self):
        """测试未知风格按写实风格处理"""
        request = IllustrationRequest(scene_prompt=SCENE, style="oil-painting")
        assert request.style == IllustrationStyle.REALISTIC
        assert STYLE_CLAUSES[IllustrationStyle.REALISTIC] in compose_prompt(request)

    def test_clause_order(self):
        """测试子句的拼接顺序"""
        request = IllustrationRequest(
            scene_prompt=SCENE,
            style=IllustrationStyle.SKETCH,
            character_description="a girl with a red scarf",
            previous_image_url="https://example.com/previous.png",
            edit_mode=True,
            fusion_mode=True,
        )
        prompt = compose_prompt(request)

        expected = (
            STANDARD_PREAMBLE
            + STYLE_CLAUSES[IllustrationStyle.SKETCH]
            + CHARACTER_CLAUSE.format(description="a girl with a red scarf")
            + EDIT_CLAUSE
            + FUSION_CLAUSE
            + CLOSING_CLAUSE
            + SCENE
        )
        assert prompt == expected

    def test_character_description_replaces_generic_clause(self):
        """测试有角色描述时不追加通用一致性子句"""
        request = IllustrationRequest(
            scene_prompt=SCENE,
            character_description="a boy in a yellow raincoat",
            consistency_mode=True,
        )
        prompt = compose_prompt(request)

        assert "a boy in a yellow raincoat" in prompt
        assert GENERIC_CONSISTENCY_CLAUSE not in prompt

    def test_consistency_mode_without_description(self):
        """测试仅开启一致性模式时追加通用子句"""
        prompt = compose_prompt(IllustrationRequest(scene_prompt=SCENE, consistency_mode=True))
        assert GENERIC_CONSISTENCY_CLAUSE in prompt

    def test_edit_mode_requires_previous_image(self):
        """测试编辑模式必须同时提供上一张图片才追加延续子句"""
        without_image = compose_prompt(IllustrationRequest(scene_prompt=SCENE, edit_mode=True))
        with_image = compose_prompt(IllustrationRequest(
            scene_prompt=SCENE,
            edit_mode=True,
            previous_image_url="https://example.com/p.png"
        ))

        assert EDIT_CLAUSE not in without_image
        assert EDIT_CLAUSE in with_image

    def test_end_to_end_scenario_prompt(self):
        """测试卡通风格加一致性模式的完整提示词"""
        request = IllustrationRequest(
            scene_prompt=SCENE,
            style=IllustrationStyle.CARTOON,
            consistency_mode=True,
        )
        prompt = compose_prompt(request)

        assert STYLE_CLAUSES[IllustrationStyle.CARTOON] in prompt
        assert GENERIC_CONSISTENCY_CLAUSE in prompt
        assert prompt.endswith(SCENE)

    def test_deterministic(self):
        """测试相同输入得到相同输出"""
        request = IllustrationRequest(scene_prompt=SCENE, style=IllustrationStyle.WATERCOLOR, fusion_mode=True)
        assert compose_prompt(request) == compose_prompt(request)

    def test_advanced_preamble(self):
        """测试高级生成使用高级开头"""
        prompt = compose_prompt(IllustrationRequest(scene_prompt=SCENE, variant=PromptVariant.ADVANCED))
        assert prompt.startswith(ADVANCED_PREAMBLE)

    def test_batch_preamble_and_continuation(self):
        """测试批量生成的页码开头和续篇子句"""
        first = compose_prompt(IllustrationRequest(scene_prompt=SCENE, variant=PromptVariant.BATCH, page_number=1))
        third = compose_prompt(IllustrationRequest(scene_prompt=SCENE, variant=PromptVariant.BATCH, page_number=3))

        assert first.startswith("Create a high-quality children's book illustration for page 1. ")
        assert STORY_CONTINUATION_CLAUSE not in first
        assert third.startswith("Create a high-quality children's book illustration for page 3. ")
        assert STORY_CONTINUATION_CLAUSE in third


@pytest.mark.unit
@pytest.mark.illustration
class TestIllustrationRequest:
    """IllustrationRequest 单元测试类"""

    @pytest.mark.parametrize("scene", ["", "   "])
    def test_empty_scene_rejected(self, scene):
        """测试场景描述不能为空"""
        with pytest.raises(ValueError):
            IllustrationRequest(scene_prompt=scene)

    def test_page_marker(self):
        """测试多页标注"""
        assert append_page_marker("prompt", 2, 4) == "prompt This is page 2 of 4. "
