from __future__ import annotations


def get_sidebar_navigation(request):
    """
    Core (Admin/Unfold): retorna `UNFOLD['SIDEBAR']['navigation']`.

    Default operacional: moderação cai em "Pendentes".
    """
    from vitrine.models import Product

    pending_count = Product.objects.filter(approval_status=Product.ApprovalStatus.PENDING).count()
    pending_title = f"Pendentes ({pending_count})" if pending_count else "Pendentes"

    return [
        {
            "title": "Catálogo",
            "icon": "checkroom",
            "items": [
                {
                    "title": pending_title,
                    "icon": "pending_actions",
                    "link": "/admin/vitrine/product/?approval_status__exact=PENDING",
                },
                {
                    "title": "Todos os Produtos",
                    "icon": "inventory_2",
                    "link": "/admin/vitrine/product/",
                },
                {
                    "title": "Na Vitrine",
                    "icon": "storefront",
                    "link": "/admin/vitrine/product/?approval_status__exact=APPROVED&is_published__exact=1",
                },
            ],
        },
        {
            "title": "Auditoria",
            "icon": "history",
            "items": [
                {
                    "title": "Eventos",
                    "icon": "receipt_long",
                    "link": "/admin/vitrine/productevent/",
                },
            ],
        },
    ]
