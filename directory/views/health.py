from django.db import connections
from django.http import JsonResponse

ENDPOINTS = {
    'donors': '/api/donors',
    'hospitals': '/api/hospitals',
    'ambulances': '/api/ambulances',
    'ambulanceVehicles': '/api/ambulance-vehicles',
    'hospitalServices': '/api/hospital-services/<hospitalId>',
    'docs': '/swagger/',
}


def healthz(request):
    try:
        with connections['default'].cursor() as c:
            c.execute('SELECT 1')
            row = c.fetchone()
        return JsonResponse({'ok': True, 'db': bool(row and row[0] == 1)})
    except Exception as e:
        return JsonResponse({'ok': False, 'error': str(e)}, status=500)


def api_index(request):
    return JsonResponse({'ok': True, 'message': 'EmerCare API', 'endpoints': ENDPOINTS})
