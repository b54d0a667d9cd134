FINDINGS_TEMPLATE_CSV = """title,comarRef,severity,notes,pageRef,category
,,Minor,,,Other
"""

FINDINGS_DEMO_CSV = """title,comarRef,severity,notes,pageRef,category
Missing CPR/First Aid certs,10.07.14.15,Major,Two aides lacked current cards,p. 3,Personnel
Medication count log incomplete,10.07.14.28,Critical,Evening shift counts missing,p. 5,Medication
Emergency drill not documented,10.07.14.38,Minor,,p. 7,Safety
"""

BULK_PASTE_PLACEHOLDER = """e.g.
Missing CPR/First Aid certs
Medication count log incomplete
Emergency drill not documented"""
