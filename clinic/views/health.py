from django.db import connections
from django.http import JsonResponse

from ..services import get_pharmacy_manager, get_reception_manager


def healthz(request):
    try:
        with connections['default'].cursor() as c:
            c.execute('SELECT 1')
            row = c.fetchone()
    except Exception as e:
        return JsonResponse({'ok': False, 'error': str(e)}, status=500)
    return JsonResponse({
        'ok': True,
        'db': bool(row and row[0] == 1),
        'queue': len(get_reception_manager().list_ordered()),
        'products': len(get_pharmacy_manager().list_products()),
    })
