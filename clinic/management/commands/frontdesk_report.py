from django.core.management.base import BaseCommand

from clinic.services import get_pharmacy_manager, get_reception_manager, seed_demo_data


class Command(BaseCommand):
    help = "Print the triage queue and pharmacy stock alerts held by this process."

    def add_arguments(self, parser):
        parser.add_argument('--seed', action='store_true', help='Load the demo fixtures before reporting.')

    def handle(self, *args, **options):
        reception = get_reception_manager()
        pharmacy = get_pharmacy_manager()
        if options['seed'] and not reception.list_ordered():
            seed_demo_data()

        entries = reception.list_ordered()
        self.stdout.write(self.style.MIGRATE_HEADING(f"Reception queue ({len(entries)} entries)"))
        for e in entries:
            doctor = f" -> {e.assigned_doctor}" if e.assigned_doctor else ''
            self.stdout.write(f"  {e.arrival_time}  {e.priority:<7} {e.status:<16} {e.patient_name} ({e.reason}){doctor}")

        alerts = pharmacy.low_stock()
        self.stdout.write(self.style.MIGRATE_HEADING(f"Stock alerts ({len(alerts)})"))
        for p in alerts:
            style = self.style.ERROR if p.status == 'out_of_stock' else self.style.WARNING
            self.stdout.write(style(f"  {p.name}: {p.quantity}/{p.min_stock} {p.unit} [{p.status}]"))

        summary = pharmacy.summary()
        self.stdout.write(self.style.SUCCESS(
            f"{summary['inStock']} in stock, {summary['lowStock']} low, "
            f"{summary['outOfStock']} out, {summary['openOrders']} open orders"
        ))
