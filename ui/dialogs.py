import flet as ft


def open_alert_dialog(page: ft.Page, *, title: str, content: ft.Control, actions: list[ft.Control]):
    dlg = ft.AlertDialog(
        modal=True,
        title=ft.Text(title),
        content=content,
        actions=actions,
        actions_alignment=ft.MainAxisAlignment.END,
    )
    page.overlay.append(dlg)
    dlg.open = True
    page.update()
    return dlg


def close_alert_dialog(page: ft.Page, dlg: ft.AlertDialog | None):
    if dlg is None:
        return
    dlg.open = False
    page.update()
    try:
        page.overlay.remove(dlg)
    except ValueError:
        pass
    page.update()


SNACK_COLORS = {
    "success": ft.Colors.GREEN_700,
    "error": ft.Colors.RED_700,
    "info": ft.Colors.BLUE_GREY_700,
}


def show_snack(page: ft.Page, message: str, kind: str = "info"):
    # drop snack bars that already closed
    for ctrl in list(page.overlay):
        if isinstance(ctrl, ft.SnackBar) and not ctrl.open:
            page.overlay.remove(ctrl)
    snack = ft.SnackBar(ft.Text(message), bgcolor=SNACK_COLORS.get(kind))
    page.overlay.append(snack)
    snack.open = True
    page.update()
    return snack
