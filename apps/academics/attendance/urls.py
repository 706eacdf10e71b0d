from django.urls import path

from .views import attendance_day_sheet, attendance_mark, attendance_mark_all

urlpatterns = [
    path('', attendance_day_sheet, name='attendance_sheet'),
    path('mark/', attendance_mark, name='attendance_mark'),
    path('mark-all/', attendance_mark_all, name='attendance_mark_all'),
]
