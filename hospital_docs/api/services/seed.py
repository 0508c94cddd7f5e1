"""
Default data for a fresh installation.

Seeding runs only when the user table is empty, so restarting the
service never duplicates rows.
"""

import logging

from hospital_docs.auth.services import UserService
from hospital_docs.persistence.models import CategoryType, DocumentCategory, Workflow, WorkflowStep
from hospital_docs.persistence.repositories import Repositories

logger = logging.getLogger(__name__)


DEFAULT_USERS = [
    {
        "username": "admin",
        "password": "admin123",
        "display_name": "ผู้ดูแลระบบ",
        "department": "ฝ่ายไอที",
        "role": "admin",
        "email": "admin@hospital.com",
    },
    {
        "username": "somchai",
        "password": "somchai123",
        "display_name": "สมชาย มั่นคง",
        "department": "แผนกบุคคล",
        "role": "manager",
        "email": "somchai@hospital.com",
    },
    {
        "username": "suda",
        "password": "suda123",
        "display_name": "สุดา มานะ",
        "department": "แผนกบัญชี",
        "role": "staff",
        "email": "suda@hospital.com",
    },
    {
        "username": "chaiyos",
        "password": "chaiyos123",
        "display_name": "ชัยยศ ใจดี",
        "department": "แผนกจัดซื้อ",
        "role": "staff",
        "email": "chaiyos@hospital.com",
    },
]

# (name, description, type, child categories)
DEFAULT_CATEGORIES = [
    ("แบบฟอร์มภายใน", "แบบฟอร์มสำหรับใช้ภายในโรงพยาบาล", CategoryType.INTERNAL_FORM, [
        ("แบบฟอร์มลางาน", "แบบฟอร์มสำหรับขออนุมัติลา"),
        ("แบบฟอร์มเบิกของ", "แบบฟอร์มสำหรับเบิกวัสดุอุปกรณ์"),
        ("แบบฟอร์มอบรม", "แบบฟอร์มสำหรับขออนุมัติอบรม/สัมมนา"),
    ]),
    ("หนังสือราชการภายนอก", "แบบฟอร์มสำหรับติดต่อหน่วยงานภายนอก", CategoryType.EXTERNAL_FORM, []),
    ("หนังสือภายใน", "เอกสารสำหรับติดต่อภายในหน่วยงาน", CategoryType.TEMPLATE, []),
]


def default_workflows(admin_id: int) -> list:
    return [
        Workflow(
            name="ขั้นตอนการอนุมัติลางาน",
            description="ลำดับขั้นตอนการอนุมัติการลางานของบุคลากร",
            steps=[
                WorkflowStep(order=1, role="manager", description="หัวหน้าแผนก"),
                WorkflowStep(order=2, role="admin", description="ฝ่ายบุคคล"),
            ],
            is_default=True,
            is_locked=True,
            created_by=admin_id,
        ),
        Workflow(
            name="ขั้นตอนการอนุมัติจัดซื้อ",
            description="ลำดับขั้นตอนการอนุมัติการจัดซื้อวัสดุอุปกรณ์",
            steps=[
                WorkflowStep(order=1, role="manager", description="หัวหน้าแผนก"),
                WorkflowStep(order=2, role="admin", description="ฝ่ายจัดซื้อ"),
                WorkflowStep(order=3, role="admin", description="ผู้อำนวยการ"),
            ],
            created_by=admin_id,
        ),
    ]


async def seed_default_data(repos: Repositories) -> bool:
    """
    Insert default users, categories and workflows into an empty store.

    Returns:
        True if data was inserted, False if users already existed
    """
    if await repos.users.list_all():
        logger.info("Users present, skipping default data")
        return False

    user_service = UserService(repos.users)
    admin = None
    for fields in DEFAULT_USERS:
        user = await user_service.register(**fields)
        if admin is None and user.is_admin:
            admin = user

    for name, description, category_type, children in DEFAULT_CATEGORIES:
        parent = await repos.categories.create(DocumentCategory(
            name=name,
            description=description,
            type=category_type.value,
        ))
        for child_name, child_description in children:
            await repos.categories.create(DocumentCategory(
                name=child_name,
                description=child_description,
                type=category_type.value,
                parent_id=parent.id,
            ))

    for workflow in default_workflows(admin.id):
        await repos.workflows.create(workflow)

    logger.info(
        f"Seeded {len(DEFAULT_USERS)} users, {len(DEFAULT_CATEGORIES)} top-level categories "
        f"and {len(default_workflows(admin.id))} workflows"
    )
    return True
