from django.contrib import admin

from .models import Appointment


@admin.register(Appointment)
class AppointmentAdmin(admin.ModelAdmin):
	list_display = ('id', 'scheduled_at', 'doctor', 'patient', 'status', 'confirmed')
	list_filter = ('status', 'confirmed', 'priority')
	search_fields = ('patient__name', 'reason', 'notes')
	date_hierarchy = 'scheduled_at'
	readonly_fields = ('uuid', 'created_at', 'updated_at')
