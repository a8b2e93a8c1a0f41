"""
Tests for the Markmap outline generator.

Tests cover:
    - Section headings and counts (including an empty manifest)
    - Module detail: flows, rules, state machines, pseudocode
    - Entities, data models, glossary, changelog
    - HTML and bracket escaping
"""

from logicmap.backends.outline_generator import generate_outline
from logicmap.examples import build_example_manifest
from logicmap.model import (
    CodeRef,
    Flow,
    FlowStep,
    Manifest,
    Module,
    ProjectInfo,
    Pseudocode,
    PseudocodeStep,
)


def _lines(manifest):
    return generate_outline(manifest).splitlines()


class TestOutlineSections:
    """Test top-level structure."""

    def test_empty_manifest_announces_every_section(self):
        manifest = Manifest(project=ProjectInfo(id="p", name="P"))
        out = generate_outline(manifest)

        assert out == (
            "# 项目：P（p）\n"
            "- 项目说明：-\n"
            "- 更新时间：-\n"
            "## 模块（0）\n"
            "## 实体（0）\n"
            "## 数据模型（0）\n"
            "## 术语表（0）\n"
            "## 变更历史（0）\n"
        )

    def test_project_header_with_version(self):
        lines = _lines(build_example_manifest())
        assert lines[0] == "# 项目：Example Shop（shop） v1.0.0"
        assert lines[1] == "- 项目说明：Order and payment handling"
        assert lines[2] == "- 更新时间：2024-05-01"

    def test_section_counts(self):
        lines = _lines(build_example_manifest())
        for heading in ("## 模块（2）", "## 实体（1）", "## 数据模型（1）", "## 术语表（1）", "## 变更历史（1）"):
            assert heading in lines

    def test_sections_in_fixed_order(self):
        out = generate_outline(build_example_manifest())
        positions = [out.index(h) for h in ("## 模块", "## 实体", "## 数据模型", "## 术语表", "## 变更历史")]
        assert positions == sorted(positions)

    def test_ends_with_newline(self):
        assert generate_outline(build_example_manifest()).endswith("\n")

    def test_deterministic(self):
        manifest = build_example_manifest()
        assert generate_outline(manifest) == generate_outline(manifest)


class TestOutlineModules:
    """Test per-module detail."""

    def test_module_header_and_metadata(self):
        lines = _lines(build_example_manifest())
        assert "### 订单（order）" in lines
        assert "- 说明：订单生命周期" in lines
        assert "- 标签：core" in lines
        assert "- 依赖：payment" in lines
        assert "- 代码入口（1）" in lines
        assert "  - `src/order/service.py`" in lines

    def test_empty_logic_collections_still_counted(self):
        out = generate_outline(build_example_manifest())
        payment = out[out.index("### 支付（payment）"):out.index("## 实体")]
        assert "- 流程（1）" in payment
        assert "- 规则（0）" in payment
        assert "- 状态机（0）" in payment
        assert "- 伪代码（0）" in payment

    def test_flow_steps_sorted_with_rule_names(self):
        lines = _lines(build_example_manifest())
        first = lines.index("      - 1. create / 写入订单 / 规则：库存校验")
        second = lines.index("      - 2. pay / 规则：支付超时")
        assert first < second
        assert "    - 触发：用户提交订单" in lines
        assert "    - 步骤（2）" in lines
        assert "    - 代码定位：`src/order/service.py:create_order:42`" in lines

    def test_unknown_rule_shown_by_id(self):
        assert "      - 1. refund / 规则：R9" in _lines(build_example_manifest())

    def test_rule_detail(self):
        lines = _lines(build_example_manifest())
        assert "  - 库存校验" in lines
        assert "    - 优先级：高" in lines
        assert "    - 分类：校验" in lines
        assert "    - 前置条件：商品上架" in lines
        assert "    - 执行后果：锁定库存" in lines
        assert "    - 影响字段：stock" in lines
        assert "    - 优先级：中" in lines

    def test_state_machine_detail(self):
        lines = _lines(build_example_manifest())
        assert "  - 订单状态（order.status）" in lines
        assert "    - 状态（4）" in lines
        assert "      - 已创建（初始）" in lines
        assert "      - 已支付" in lines
        assert "      - 已取消（终态）" in lines
        assert "    - 转换（3）" in lines
        assert "      - created -> paid / 触发：支付成功" in lines

    def test_pseudocode_detail(self):
        lines = _lines(build_example_manifest())
        assert "  - `create_order(user_id, items)`" in lines
        assert "    - 返回：order_id" in lines
        assert "    - 步骤（4）" in lines
        assert "      - 校验库存" in lines
        assert "        - 库存不足则报错" in lines
        assert "    - 调用（1）" in lines
        assert "      - orders（db） `orders`" in lines

    def test_pseudocode_indent_clamped(self):
        pc = Pseudocode(id="pc", name="run", steps=[PseudocodeStep(indent=40, text="deep")])
        manifest = Manifest(project=ProjectInfo(id="p", name="P"), modules=[Module(id="m", name="M", pseudocodes=[pc])])
        deep = [line for line in _lines(manifest) if line.endswith("- deep")][0]
        assert deep == "  " * 9 + "- deep"

    def test_code_ref_with_backtick(self):
        flow = Flow(id="f", name="F", code_ref=CodeRef(file="a`b.py"))
        manifest = Manifest(project=ProjectInfo(id="p", name="P"), modules=[Module(id="m", name="M", flows=[flow])])
        assert "    - 代码定位：`` a`b.py ``" in _lines(manifest)


class TestOutlineStorage:
    """Test entities, data models, glossary and changelog."""

    def test_entity(self):
        lines = _lines(build_example_manifest())
        assert "- 关联模型：orders" in lines
        assert "- 核心字段（1）" in lines
        assert "  - 状态：订单状态（字段名：status）" in lines
        assert "  - 已创建（created）" in lines
        assert "  - 已支付（paid）：已收到款项" in lines

    def test_data_model(self):
        lines = _lines(build_example_manifest())
        assert "### 订单表（orders）" in lines
        assert "- 对应实体：order" in lines
        assert "- 来源：`models/orders.mod.yao`" in lines
        assert "- 字段（2）" in lines
        assert "  - `id: int` - 主键" in lines

    def test_glossary_and_changelog(self):
        lines = _lines(build_example_manifest())
        assert "- sku（SKU）：库存单位" in lines
        assert "- 2024-05-01 / init：首次生成" in lines


class TestOutlineEscaping:
    """Manifest text must not inject markup or mind-map syntax."""

    def test_html_escaped(self):
        manifest = Manifest(
            project=ProjectInfo(id="p", name="P"),
            modules=[Module(id="m", name="M", description="<b>x</b> & y")],
        )
        out = generate_outline(manifest)
        assert "<b>" not in out
        assert "- 说明：&lt;b&gt;x&lt;/b&gt; &amp; y" in out

    def test_brackets_full_width(self):
        manifest = Manifest(
            project=ProjectInfo(id="p", name="P"),
            modules=[Module(id="m", name="A (beta) [x]")],
        )
        assert "### A （beta） 【x】（m）" in _lines(manifest)

    def test_code_spans_cannot_start_new_lines(self):
        """Line breaks in signatures and paths never create headings or bullets."""
        pc = Pseudocode(
            id="pc",
            name="calc\n## 伪造标题",
            params=["a\n- b"],
            code_ref=CodeRef(file="a.py\n# x"),
        )
        manifest = Manifest(
            project=ProjectInfo(id="p", name="P"),
            modules=[Module(id="m", name="M", pseudocodes=[pc])],
        )
        lines = _lines(manifest)

        headings = [line for line in lines if line.startswith("#")]
        assert headings == [
            "# 项目：P（p）",
            "## 模块（1）",
            "### M（m）",
            "## 实体（0）",
            "## 数据模型（0）",
            "## 术语表（0）",
            "## 变更历史（0）",
        ]
        assert "  - `calc ## 伪造标题(a - b)`" in lines
        assert "    - 代码定位：`a.py # x`" in lines

    def test_newlines_kept_inside_one_node(self):
        step = FlowStep(id="s", order=1, name="a\nb")
        manifest = Manifest(
            project=ProjectInfo(id="p", name="P"),
            modules=[Module(id="m", name="M", flows=[Flow(id="f", name="F", steps=[step])])],
        )
        assert "      - 1. a<br/>b" in _lines(manifest)
