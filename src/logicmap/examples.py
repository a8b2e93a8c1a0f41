"""
Example manifest builder used by the demos and tests.

Builds a small order/payment project with one flow per module, a rule set,
an order-status state machine, one pseudocode operation, an entity, a data
model, a glossary and a changelog. The payment module depends on an
undeclared "risk" module so the dependency graph shows an external node.
"""
from logicmap.model import (
    ApiCall,
    ChangelogEntry,
    CodeRef,
    DataModel,
    DataModelSource,
    Entity,
    EntityKeyField,
    EntityStatus,
    Flow,
    FlowStep,
    GlossaryEntry,
    Manifest,
    ModelField,
    Module,
    ProjectInfo,
    Pseudocode,
    PseudocodeStep,
    Rule,
    RuleAffects,
    StateDefinition,
    StateMachine,
    StateTransition,
)


def build_example_manifest() -> Manifest:
    project = ProjectInfo(
        id="shop",
        name="Example Shop",
        description="Order and payment handling",
        version="1.0.0",
        updated_at="2024-05-01",
    )

    # Steps are deliberately listed out of order.
    create_order = Flow(
        id="f1",
        name="下单",
        trigger="用户提交订单",
        steps=[
            FlowStep(id="s2", order=2, name="pay", rules=["R2"]),
            FlowStep(id="s1", order=1, name="create", description="写入订单", rules=["R1", "R1"]),
        ],
        code_ref=CodeRef(file="src/order/service.py", function="create_order", line=42),
    )

    order_rules = [
        Rule(
            id="R1",
            name="库存校验",
            description="库存不足时拒绝下单",
            priority="high",
            category="校验",
            constraints=["商品上架"],
            effects=["锁定库存"],
            affects=RuleAffects(entities=["order"], fields=["stock"], operations=["U"]),
        ),
        Rule(id="R2", name="支付超时", description="30 分钟未支付自动取消", priority="medium"),
    ]

    order_status = StateMachine(
        id="order_status",
        name="订单状态",
        entity="order",
        status_field="status",
        states=[
            StateDefinition(id="created", name="已创建", is_initial=True),
            StateDefinition(id="paid", name="已支付"),
            StateDefinition(id="cancelled", name="已取消", is_final=True),
            StateDefinition(id="done", name="已完成", is_final=True),
        ],
        transitions=[
            StateTransition(from_state="created", to_state="paid", trigger="支付成功"),
            StateTransition(from_state="created", to_state="cancelled", trigger="超时", rules=["R2"]),
            StateTransition(from_state="paid", to_state="done", trigger="确认收货"),
        ],
    )

    create_pc = Pseudocode(
        id="pc_create",
        name="create_order",
        params=["user_id", "items"],
        returns="order_id",
        steps=[
            PseudocodeStep(indent=0, text="校验库存", type="condition"),
            PseudocodeStep(indent=1, text="库存不足则报错", type="error"),
            PseudocodeStep(indent=0, text="写入订单表", type="action"),
            PseudocodeStep(indent=0, text="返回订单号", type="return"),
        ],
        calls=[ApiCall(name="orders", type="db", table="orders")],
        code_ref=CodeRef(file="src/order/service.py", function="create_order"),
    )

    order = Module(
        id="order",
        name="订单",
        description="订单生命周期",
        tags=["core"],
        dependencies=["payment", "payment"],
        code_refs=[CodeRef(file="src/order/service.py")],
        flows=[create_order],
        rules=order_rules,
        state_machines=[order_status],
        pseudocodes=[create_pc],
    )

    payment = Module(
        id="payment",
        name="支付",
        description="支付渠道对接",
        dependencies=["risk"],
        flows=[
            Flow(
                id="f_refund",
                name="退款",
                steps=[FlowStep(id="r1", order=1, name="refund", rules=["R9"])],
            )
        ],
    )

    return Manifest(
        project=project,
        modules=[order, payment],
        entities=[
            Entity(
                id="order",
                name="订单",
                description="一次购买",
                models=["orders"],
                key_fields=[EntityKeyField(name="status", label="状态", description="订单状态")],
                statuses=[
                    EntityStatus(value="created", label="已创建"),
                    EntityStatus(value="paid", label="已支付", description="已收到款项"),
                ],
            )
        ],
        data_models=[
            DataModel(
                id="orders",
                name="订单表",
                table="orders",
                description="订单主表",
                entity="order",
                fields=[
                    ModelField(name="id", type="int", label="主键", required=True, unique=True),
                    ModelField(name="status", type="string", label="状态"),
                ],
                source=DataModelSource(file="models/orders.mod.yao", type="yao"),
            )
        ],
        glossary={"sku": GlossaryEntry(term="SKU", description="库存单位")},
        changelog=[ChangelogEntry(date="2024-05-01", type="init", summary="首次生成")],
        schema="logic-manifest/v3.1",
    )
