"""
URL mappings for the front-office API.

Paths mirror the base paths used by the front-end service layer
(``/reception``, ``/pharmacy``, ``/notifications``) under an ``api/``
prefix.  Trailing slashes are deliberately omitted because the front end
calls the endpoints without them.  Fixed sub-paths (``waiting``,
``low-stock``, ``unread``...) are listed before the ``<id>`` routes they would
otherwise be captured by.
"""
from django.urls import path

from .views.dashboard import staff_dashboard
from .views.health import healthz
from .views.notifications import (
    notification_delete,
    notification_delete_all,
    notification_list,
    notification_mark_all_read,
    notification_mark_read,
    notification_unread,
    notification_unread_count,
)
from .views.pharmacy import (
    order_collection,
    order_detail,
    order_pending,
    order_update_status,
    pharmacy_summary,
    product_collection,
    product_detail,
    product_low_stock,
    product_restock,
    product_update_stock,
)
from .views.reception import (
    available_doctors,
    reception_assign,
    reception_cancel,
    reception_collection,
    reception_complete,
    reception_detail,
    reception_set_priority,
    reception_today_stats,
    reception_update_status,
    reception_waiting,
)

urlpatterns = [
    path('healthz', healthz, name='healthz'),
    path('api/dashboard', staff_dashboard, name='staff_dashboard'),

    # Reception
    path('api/reception', reception_collection, name='reception_collection'),
    path('api/reception/waiting', reception_waiting, name='reception_waiting'),
    path('api/reception/stats/today', reception_today_stats, name='reception_today_stats'),
    path('api/reception/doctors', available_doctors, name='available_doctors'),
    path('api/reception/<str:entry_id>', reception_detail, name='reception_detail'),
    path('api/reception/<str:entry_id>/assign', reception_assign, name='reception_assign'),
    path('api/reception/<str:entry_id>/priority', reception_set_priority, name='reception_set_priority'),
    path('api/reception/<str:entry_id>/complete', reception_complete, name='reception_complete'),
    path('api/reception/<str:entry_id>/cancel', reception_cancel, name='reception_cancel'),
    path('api/reception/<str:entry_id>/status', reception_update_status, name='reception_update_status'),

    # Pharmacy
    path('api/pharmacy/summary', pharmacy_summary, name='pharmacy_summary'),
    path('api/pharmacy/products', product_collection, name='product_collection'),
    path('api/pharmacy/products/low-stock', product_low_stock, name='product_low_stock'),
    path('api/pharmacy/products/<str:product_id>', product_detail, name='product_detail'),
    path('api/pharmacy/products/<str:product_id>/restock', product_restock, name='product_restock'),
    path('api/pharmacy/products/<str:product_id>/stock', product_update_stock, name='product_update_stock'),
    path('api/pharmacy/orders', order_collection, name='order_collection'),
    path('api/pharmacy/orders/pending', order_pending, name='order_pending'),
    path('api/pharmacy/orders/<str:order_id>', order_detail, name='order_detail'),
    path('api/pharmacy/orders/<str:order_id>/status', order_update_status, name='order_update_status'),

    # Notifications
    path('api/notifications', notification_list, name='notification_list'),
    path('api/notifications/unread', notification_unread, name='notification_unread'),
    path('api/notifications/unread-count', notification_unread_count, name='notification_unread_count'),
    path('api/notifications/read-all', notification_mark_all_read, name='notification_mark_all_read'),
    path('api/notifications/all', notification_delete_all, name='notification_delete_all'),
    path('api/notifications/<str:notification_id>', notification_delete, name='notification_delete'),
    path('api/notifications/<str:notification_id>/read', notification_mark_read, name='notification_mark_read'),
]
